"""Interfaces exposing the capability layer: the ``github`` CLI and the REST API."""
