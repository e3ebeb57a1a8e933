"""
Fallback handler for errors nothing else claimed.

Anything that is neither a capability error nor a GitHub API error is a bug
in this server. The response hides the exception text and carries an
``error_id`` that also appears in the log line, so a caller's report can be
matched to the traceback.
"""

from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from github.core.logging_config import get_logger

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = uuid4().hex[:12]
    logger.exception(
        f"Unhandled {type(exc).__name__} [{error_id}] in {request.method} {request.url.path}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_type": type(exc).__name__, "error_id": error_id},
    )
