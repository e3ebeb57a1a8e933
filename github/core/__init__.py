"""
Core utilities and configuration for the GitHub capability server.

This package provides settings, logging configuration and the error taxonomy
shared by the client, the capability layer and both interfaces.
"""

from github.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
