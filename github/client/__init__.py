"""Async client for the GitHub REST API.

Exports:
- ``GitHubApiClient``: httpx based client used by every capability.
- The pydantic resource models it returns.
"""

from .client import GitHubApiClient
from .models import (
    BranchRef,
    FileContent,
    Issue,
    IssueComment,
    Label,
    PullRequest,
    RateLimit,
    Repository,
    SearchResult,
    User,
)

__all__ = [
    "GitHubApiClient",
    "BranchRef",
    "FileContent",
    "Issue",
    "IssueComment",
    "Label",
    "PullRequest",
    "RateLimit",
    "Repository",
    "SearchResult",
    "User",
]
