"""
Exception handlers for the GitHub REST API.

This package contains custom exception handlers for different error types
and a setup function to register them with the FastAPI application.
"""

from fastapi import FastAPI

from github.core.errors import CapabilityError, GitHubApiError
from github.core.logging_config import get_logger

from .domain_handler import capability_exception_handler, github_api_exception_handler
from .global_handler import global_exception_handler

logger = get_logger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    This function should be called during application initialization to set up
    all custom exception handlers.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(CapabilityError, capability_exception_handler)
    app.add_exception_handler(GitHubApiError, github_api_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")


__all__ = ["setup_exception_handlers"]
