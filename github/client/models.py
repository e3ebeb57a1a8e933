"""Pydantic models for the GitHub REST API resources used by the capabilities.

Only the fields the capabilities surface are declared; anything else GitHub
returns is ignored. Models are serialised back to plain dicts with
``model_dump(mode="json")`` when they become capability output.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GitHubModel(BaseModel):
    """Shared base: tolerate unknown fields from GitHub payloads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(GitHubModel):
    login: str
    id: int
    type: str = "User"
    html_url: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class Label(GitHubModel):
    name: str
    color: Optional[str] = None
    description: Optional[str] = None


class Repository(GitHubModel):
    id: int
    name: str
    full_name: str
    owner: User
    private: bool = False
    html_url: str
    description: Optional[str] = None
    fork: bool = False
    default_branch: Optional[str] = None
    language: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    archived: bool = False
    topics: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None


class Issue(GitHubModel):
    """An issue. The issues API also returns pull requests; see ``is_pull_request``."""

    id: int
    number: int
    title: str
    state: str
    html_url: str
    body: Optional[str] = None
    user: Optional[User] = None
    labels: List[Label] = Field(default_factory=list)
    assignees: List[User] = Field(default_factory=list)
    comments: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    is_pull_request: bool = False

    @model_validator(mode="before")
    @classmethod
    def detect_pull_request(cls, data: Any) -> Any:
        if isinstance(data, dict) and "pull_request" in data:
            data = dict(data)
            data["is_pull_request"] = data.get("pull_request") is not None
        return data


class IssueComment(GitHubModel):
    id: int
    body: str
    html_url: str
    user: Optional[User] = None
    created_at: Optional[datetime] = None


class BranchRef(GitHubModel):
    label: Optional[str] = None
    ref: str
    sha: str


class PullRequest(GitHubModel):
    id: int
    number: int
    title: str
    state: str
    html_url: str
    body: Optional[str] = None
    user: Optional[User] = None
    draft: bool = False
    merged: Optional[bool] = None
    merged_at: Optional[datetime] = None
    head: BranchRef
    base: BranchRef
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FileContent(GitHubModel):
    """A single file from the contents API with its payload decoded to text."""

    name: str
    path: str
    sha: str
    size: int
    html_url: Optional[str] = None
    encoding: str = "utf-8"
    content: str


class RateLimit(GitHubModel):
    limit: int
    remaining: int
    used: int = 0
    reset: datetime


T = TypeVar("T", bound=GitHubModel)


class SearchResult(GitHubModel, Generic[T]):
    total_count: int
    incomplete_results: bool = False
    items: List[T] = Field(default_factory=list)
