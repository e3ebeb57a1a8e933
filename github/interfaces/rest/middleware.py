"""
Request Logging Middleware.

Logs every request with its status code and duration, adds an
``X-Process-Time`` header, and warns about slow requests. Health probes are
logged at DEBUG so they do not flood production logs.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from github.core.logging_config import get_logger

logger = get_logger(__name__)

SLOW_REQUEST_MS = 1000
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging API requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(f"API request failed: {method} {path} after {duration_ms:.2f}ms: {e}")
            raise

        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        log = logger.debug if path in QUIET_PATHS else logger.info
        log(f"{method} {path} -> {response.status_code} ({duration_ms:.2f}ms)")

        if duration_ms > SLOW_REQUEST_MS:
            logger.warning(
                f"Slow API request: {method} {path} took {duration_ms:.2f}ms",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": duration_ms,
                    "status_code": response.status_code,
                },
            )
        return response
