"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers exception handlers and includes all API routers.
It serves as the root of the web server.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from github import __version__
from github.core.config import API_V1_STR, PROJECT_NAME, Settings, get_settings
from github.core.logging_config import get_logger, setup_logging
from github.service import CapabilityService

from .api.v1 import capabilities, health, upstream
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Reports the service ``create_app`` built on startup and closes its HTTP
    client on shutdown.
    """
    settings: Settings = app.state.settings
    service: CapabilityService = app.state.capability_service
    logger.info(f"Starting up {PROJECT_NAME} capability server {__version__} (env={settings.env.value})...")
    if service.client.token is None:
        logger.warning("GITHUB_TOKEN is not set; requests to GitHub are unauthenticated and heavily rate limited")
    logger.info(f"Capabilities registered: {len(service.registry)}")

    yield

    logger.info(f"Shutting down {PROJECT_NAME} capability server...")
    await service.close()


def create_app(settings: Optional[Settings] = None, *, service: Optional[CapabilityService] = None) -> FastAPI:
    """
    Build the ASGI application.

    Args:
        settings: Configuration for this app; the process settings when omitted
        service: Capability service to serve; built from ``settings`` when omitted
    """
    settings = settings or get_settings()
    setup_logging(log_level=settings.log_level, log_format=settings.log_format)

    application = FastAPI(
        title=PROJECT_NAME,
        description="""
    GitHub Capability Server API

    Exposes named GitHub operations ("capabilities") such as reading repositories,
    listing issues and pull requests, or opening issues. The same capabilities are
    available from the `github` command-line tool.
    """,
        version=__version__,
        openapi_url=f"{API_V1_STR}/openapi.json",
        docs_url=f"{API_V1_STR}/docs",
        redoc_url=f"{API_V1_STR}/redoc",
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.capability_service = service if service is not None else CapabilityService.from_settings(settings)

    cors = settings.cors
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    application.add_middleware(RequestLoggingMiddleware)

    setup_exception_handlers(application)

    application.include_router(health.router, tags=["health"])
    application.include_router(
        capabilities.router, prefix=f"{API_V1_STR}/capabilities", tags=["capabilities"]
    )
    application.include_router(upstream.router, prefix=f"{API_V1_STR}/github", tags=["github"])
    return application


app = create_app()
