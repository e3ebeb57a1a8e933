from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Iterable

from pydantic import BaseModel

from .base import (
    Capability,
    CapabilityContext,
    CapabilityName,
    CapabilityParam,
    CapabilityResult,
    CapabilitySpec,
    ParamType,
)
from .registry import CapabilityRegistry

OWNER = CapabilityParam("owner", required=True, description="Repository owner (user or organisation)")
REPO = CapabilityParam("repo", required=True, description="Repository name, or 'owner/name'")
NUMBER = CapabilityParam(
    "number", ParamType.integer, required=True, description="Issue or pull request number", minimum=1
)
STATE = CapabilityParam(
    "state", default="open", description="Filter by state", choices=("open", "closed", "all")
)
LIMIT = CapabilityParam(
    "limit", ParamType.integer, default=30, description="Maximum number of items to return", minimum=1
)
PER_PAGE = CapabilityParam(
    "per_page", ParamType.integer, default=30, description="Page size (1-100)", minimum=1, maximum=100
)
QUERY = CapabilityParam("query", required=True, description="GitHub search query")


def _dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json")


def _items(models: Iterable[BaseModel]) -> Dict[str, Any]:
    items = [_dump(m) for m in models]
    return {"count": len(items), "items": items}


@dataclass(frozen=True)
class UserMeCapability(Capability):
    """Return the user the configured token belongs to."""

    name: CapabilityName = CapabilityName.user_me
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.user_me.value,
        description="Show the authenticated GitHub user",
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        user = await ctx.client.get_authenticated_user()
        return CapabilityResult(ok=True, output=_dump(user))


@dataclass(frozen=True)
class RateLimitCapability(Capability):
    """Report the core REST API rate limit for the configured credentials."""

    name: CapabilityName = CapabilityName.rate_limit_get
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.rate_limit_get.value,
        description="Show the remaining GitHub API rate limit",
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        rate = await ctx.client.get_rate_limit()
        return CapabilityResult(ok=True, output=_dump(rate))


@dataclass(frozen=True)
class RepoGetCapability(Capability):
    """
    Fetch a single repository.

    Args (via ``execute``):
        owner (str): Repository owner.
        repo (str): Repository name. ``owner/name`` is accepted on its own.
    """

    name: CapabilityName = CapabilityName.repo_get
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.repo_get.value,
        description="Get repository metadata",
        params=(OWNER, REPO),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        repo = await ctx.client.get_repository(args["owner"], args["repo"])
        return CapabilityResult(ok=True, output=_dump(repo))


@dataclass(frozen=True)
class RepoListCapability(Capability):
    """List the repositories of a user or an organisation, most recently updated first."""

    name: CapabilityName = CapabilityName.repo_list
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.repo_list.value,
        description="List repositories of a user or organisation",
        params=(OWNER, PER_PAGE, LIMIT),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        repos = await ctx.client.list_repositories(args["owner"], per_page=args["per_page"], limit=args["limit"])
        return CapabilityResult(ok=True, output=_items(repos))


@dataclass(frozen=True)
class IssueListCapability(Capability):
    """
    List issues of a repository.

    Pull requests are filtered out even though GitHub's issues endpoint returns them.
    """

    name: CapabilityName = CapabilityName.issue_list
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.issue_list.value,
        description="List issues of a repository",
        params=(
            OWNER,
            REPO,
            STATE,
            CapabilityParam("labels", ParamType.string_list, description="Only issues with all of these labels"),
            PER_PAGE,
            LIMIT,
        ),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        issues = await ctx.client.list_issues(
            args["owner"],
            args["repo"],
            state=args["state"],
            labels=args.get("labels"),
            per_page=args["per_page"],
            limit=args["limit"],
        )
        return CapabilityResult(ok=True, output=_items(issues))


@dataclass(frozen=True)
class IssueGetCapability(Capability):
    name: CapabilityName = CapabilityName.issue_get
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.issue_get.value,
        description="Get a single issue",
        params=(OWNER, REPO, NUMBER),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        issue = await ctx.client.get_issue(args["owner"], args["repo"], args["number"])
        return CapabilityResult(ok=True, output=_dump(issue))


@dataclass(frozen=True)
class IssueCreateCapability(Capability):
    """
    Open a new issue.

    This capability changes state on GitHub and is rejected when the server
    runs read-only.
    """

    name: CapabilityName = CapabilityName.issue_create
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.issue_create.value,
        description="Create an issue",
        read_only=False,
        params=(
            OWNER,
            REPO,
            CapabilityParam("title", required=True, description="Issue title"),
            CapabilityParam("body", description="Issue body (markdown)"),
            CapabilityParam("labels", ParamType.string_list, description="Labels to apply"),
            CapabilityParam("assignees", ParamType.string_list, description="Logins to assign"),
        ),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        issue = await ctx.client.create_issue(
            args["owner"],
            args["repo"],
            title=args["title"],
            body=args.get("body"),
            labels=args.get("labels"),
            assignees=args.get("assignees"),
        )
        return CapabilityResult(ok=True, output=_dump(issue))


@dataclass(frozen=True)
class IssueCommentCapability(Capability):
    """Add a comment to an issue or pull request. Mutating."""

    name: CapabilityName = CapabilityName.issue_comment
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.issue_comment.value,
        description="Comment on an issue or pull request",
        read_only=False,
        params=(OWNER, REPO, NUMBER, CapabilityParam("body", required=True, description="Comment body (markdown)")),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        comment = await ctx.client.create_issue_comment(args["owner"], args["repo"], args["number"], body=args["body"])
        return CapabilityResult(ok=True, output=_dump(comment))


@dataclass(frozen=True)
class PullListCapability(Capability):
    name: CapabilityName = CapabilityName.pull_list
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.pull_list.value,
        description="List pull requests of a repository",
        params=(OWNER, REPO, STATE, PER_PAGE, LIMIT),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        pulls = await ctx.client.list_pull_requests(
            args["owner"], args["repo"], state=args["state"], per_page=args["per_page"], limit=args["limit"]
        )
        return CapabilityResult(ok=True, output=_items(pulls))


@dataclass(frozen=True)
class PullGetCapability(Capability):
    name: CapabilityName = CapabilityName.pull_get
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.pull_get.value,
        description="Get a single pull request",
        params=(OWNER, REPO, NUMBER),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        pull = await ctx.client.get_pull_request(args["owner"], args["repo"], args["number"])
        return CapabilityResult(ok=True, output=_dump(pull))


@dataclass(frozen=True)
class FileGetCapability(Capability):
    """
    Read a file from a repository.

    Text files are returned decoded; binary files keep their base64 payload
    and report ``encoding="base64"``.
    """

    name: CapabilityName = CapabilityName.file_get
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.file_get.value,
        description="Read a file from a repository",
        params=(
            OWNER,
            REPO,
            CapabilityParam("path", required=True, description="Path of the file inside the repository"),
            CapabilityParam("ref", description="Branch, tag or commit (default branch when omitted)"),
        ),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        content = await ctx.client.get_file_contents(args["owner"], args["repo"], args["path"], ref=args.get("ref"))
        return CapabilityResult(ok=True, output=_dump(content))


@dataclass(frozen=True)
class SearchRepositoriesCapability(Capability):
    name: CapabilityName = CapabilityName.search_repositories
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.search_repositories.value,
        description="Search repositories",
        params=(
            QUERY,
            CapabilityParam(
                "sort", description="Sort field", choices=("stars", "forks", "help-wanted-issues", "updated")
            ),
            CapabilityParam("order", default="desc", description="Sort order", choices=("asc", "desc")),
            PER_PAGE,
        ),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        result = await ctx.client.search_repositories(
            args["query"], sort=args.get("sort"), order=args["order"], per_page=args["per_page"]
        )
        return CapabilityResult(ok=True, output=_dump(result))


@dataclass(frozen=True)
class SearchIssuesCapability(Capability):
    name: CapabilityName = CapabilityName.search_issues
    spec: ClassVar[CapabilitySpec] = CapabilitySpec(
        name=CapabilityName.search_issues.value,
        description="Search issues and pull requests",
        params=(QUERY, PER_PAGE),
    )

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult:
        result = await ctx.client.search_issues(args["query"], per_page=args["per_page"])
        return CapabilityResult(ok=True, output=_dump(result))


BUILTIN_CAPABILITIES = (
    UserMeCapability,
    RateLimitCapability,
    RepoGetCapability,
    RepoListCapability,
    IssueListCapability,
    IssueGetCapability,
    IssueCreateCapability,
    IssueCommentCapability,
    PullListCapability,
    PullGetCapability,
    FileGetCapability,
    SearchRepositoriesCapability,
    SearchIssuesCapability,
)


def build_default_registry() -> CapabilityRegistry:
    """Return a registry holding every built-in capability."""
    registry = CapabilityRegistry()
    for cap_cls in BUILTIN_CAPABILITIES:
        registry.register(cap_cls())
    return registry
