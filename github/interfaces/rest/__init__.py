"""
REST interface.

``app`` is the ASGI application served by uvicorn or gunicorn as
``github.interfaces.rest:app``.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
