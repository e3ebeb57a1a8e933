"""
Capability and GitHub Exception Handlers.

Maps the package's error taxonomy to HTTP responses:

- unknown capability or GitHub resource -> 404
- policy rejection -> 403
- invalid arguments -> 422
- GitHub rate limit -> 429 (with ``Retry-After`` when known)
- any other GitHub failure, including rejected credentials -> 502
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from github.core.errors import (
    CapabilityAccessDeniedError,
    CapabilityArgumentError,
    CapabilityError,
    CapabilityNotFoundError,
    GitHubApiError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from github.core.logging_config import get_logger

logger = get_logger(__name__)

_CAPABILITY_STATUS = {
    CapabilityNotFoundError: 404,
    CapabilityAccessDeniedError: 403,
    CapabilityArgumentError: 422,
}


def _body(exc: Exception, upstream_status: Optional[int] = None) -> Dict[str, object]:
    content: Dict[str, object] = {"detail": str(exc), "error_type": type(exc).__name__}
    if upstream_status is not None:
        content["upstream_status"] = upstream_status
    return content


async def capability_exception_handler(request: Request, exc: CapabilityError) -> JSONResponse:
    status_code = _CAPABILITY_STATUS.get(type(exc), 400)
    logger.info(f"Capability request rejected in {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content=_body(exc))


async def github_api_exception_handler(request: Request, exc: GitHubApiError) -> JSONResponse:
    if isinstance(exc, GitHubNotFoundError):
        return JSONResponse(status_code=404, content=_body(exc, exc.status_code))

    if isinstance(exc, GitHubRateLimitError):
        headers: Dict[str, str] = {}
        retry_after = exc.retry_after
        if retry_after is None and exc.reset_at is not None:
            retry_after = max(0, int((exc.reset_at - datetime.now(timezone.utc)).total_seconds()))
        if retry_after is not None:
            headers["Retry-After"] = str(retry_after)
        logger.warning(f"GitHub rate limit hit in {request.method} {request.url.path}")
        return JSONResponse(status_code=429, content=_body(exc, exc.status_code), headers=headers)

    logger.error(
        f"GitHub API error in {request.method} {request.url.path}: {exc}",
        extra={"upstream_status": exc.status_code, "details": exc.details},
    )
    return JSONResponse(status_code=502, content=_body(exc, exc.status_code))
