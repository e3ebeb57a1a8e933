"""Error types for the GitHub capability server.

Purpose:
- ``GitHubApiError`` and subclasses are raised by ``GitHubApiClient`` and carry
  HTTP-oriented context (status code, error body) for diagnosis.
- ``CapabilityError`` and subclasses are raised by the capability layer when a
  capability is unknown, denied by policy, or called with bad arguments.

Both interfaces translate these into responses: the REST API maps them to
status codes, the CLI prints them and exits non-zero.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional


class GitHubError(Exception):
    """Base class for every error raised by this package."""


class GitHubApiError(GitHubError):
    """Base error for GitHub REST API failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload from GitHub (usually its ``message`` field).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GitHubNotFoundError(GitHubApiError):
    """The requested GitHub resource does not exist or is not visible (HTTP 404)."""

    def __init__(self, resource: str, *, details: Optional[Any] = None) -> None:
        super().__init__(f"GitHub resource not found: {resource}", status_code=404, details=details)
        self.resource = resource


class GitHubAuthError(GitHubApiError):
    """GitHub rejected the credentials (HTTP 401, or 403 that is not a rate limit)."""


class GitHubRateLimitError(GitHubApiError):
    """GitHub rate limit exhausted (HTTP 403/429).

    Args:
        reset_at: When the limit resets, from ``X-RateLimit-Reset``.
        retry_after: Seconds to wait, from ``Retry-After`` (secondary limits).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        reset_at: Optional[datetime] = None,
        retry_after: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, status_code=status_code, details=details)
        self.reset_at = reset_at
        self.retry_after = retry_after


class GitHubValidationError(GitHubApiError):
    """GitHub refused the request payload (HTTP 422)."""


class CapabilityError(GitHubError):
    pass


class CapabilityNotFoundError(CapabilityError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown capability: '{name}'")
        self.name = name


class CapabilityAccessDeniedError(CapabilityError):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Capability '{name}' is not permitted: {reason}")
        self.name = name
        self.reason = reason


class CapabilityArgumentError(CapabilityError):
    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"Invalid arguments for capability '{name}': {message}")
        self.name = name
        self.message = message
