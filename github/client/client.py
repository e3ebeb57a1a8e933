from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx

from github.core.config import GitHubApiConfig
from github.core.errors import (
    GitHubApiError,
    GitHubAuthError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubValidationError,
)

from .models import (
    FileContent,
    GitHubModel,
    Issue,
    IssueComment,
    PullRequest,
    RateLimit,
    Repository,
    SearchResult,
    User,
)

M = TypeVar("M", bound=GitHubModel)

MAX_PER_PAGE = 100


def _clamp_per_page(per_page: int) -> int:
    return max(1, min(MAX_PER_PAGE, int(per_page)))


class GitHubApiClient:
    """
    Thin async HTTP client for the GitHub REST API.

    Responsibilities:
    - build authenticated requests with the versioned media type
    - follow ``Link`` pagination up to a caller supplied limit
    - translate error responses into ``GitHubApiError`` subclasses

    The client is safe to share across concurrent requests; it owns its
    ``httpx.AsyncClient`` unless one is injected.
    """

    def __init__(
        self,
        base_url: str = "https://api.github.com",
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        api_version: str = "2022-11-28",
        user_agent: str = "github-capability-server",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.api_version = api_version
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: GitHubApiConfig, *, client: Optional[httpx.AsyncClient] = None) -> "GitHubApiClient":
        return cls(
            config.api_url,
            token=config.token,
            timeout=config.timeout,
            api_version=config.api_version,
            user_agent=config.user_agent,
            client=client,
        )

    async def __aenter__(self) -> "GitHubApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.api_version,
            "User-Agent": self.user_agent,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        resource: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = self._url(path)
        self._logger.debug("GitHubApiClient: %s %s params=%s", method, url, params)
        try:
            r = await self._client.request(method, url, headers=self._headers(), params=params, json=json)
        except httpx.TransportError as e:
            raise GitHubApiError(f"GitHub request failed: {method} {url}: {e}") from e
        if r.is_error:
            self._raise_for_response(r, resource)
        return r

    def _raise_for_response(self, r: httpx.Response, resource: str) -> None:
        try:
            body = r.json()
        except ValueError:
            body = r.text
        message = body.get("message") if isinstance(body, dict) else None
        details = message or body
        status = r.status_code

        if status == 404:
            raise GitHubNotFoundError(resource, details=details)

        remaining = r.headers.get("x-ratelimit-remaining")
        retry_after = r.headers.get("retry-after")
        if status == 429 or (status == 403 and (remaining == "0" or retry_after is not None)):
            reset_at: Optional[datetime] = None
            reset = r.headers.get("x-ratelimit-reset")
            if reset and reset.isdigit():
                reset_at = datetime.fromtimestamp(int(reset), tz=timezone.utc)
            raise GitHubRateLimitError(
                f"GitHub rate limit exceeded for {resource}",
                status_code=status,
                reset_at=reset_at,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                details=details,
            )
        if status in (401, 403):
            raise GitHubAuthError(
                f"GitHub denied access to {resource}: {status}", status_code=status, details=details
            )
        if status == 422:
            raise GitHubValidationError(
                f"GitHub rejected request for {resource}", status_code=status, details=body
            )
        raise GitHubApiError(f"GitHub request for {resource} failed: {status}", status_code=status, details=details)

    async def _get_model(self, path: str, model: Type[M], *, resource: str, params: Optional[Dict[str, Any]] = None) -> M:
        r = await self._request("GET", path, resource=resource, params=params)
        return model.model_validate(r.json())

    async def _paginate(
        self,
        path: str,
        *,
        resource: str,
        params: Dict[str, Any],
        limit: Optional[int],
    ) -> List[Dict[str, Any]]:
        """Collect items across pages by following ``rel="next"`` links."""
        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = path
        next_params: Optional[Dict[str, Any]] = params
        while next_url:
            r = await self._request("GET", next_url, resource=resource, params=next_params)
            page = r.json()
            if not isinstance(page, list):
                raise GitHubApiError(f"Unexpected response shape for {resource}", status_code=r.status_code, details=page)
            items.extend(page)
            if limit is not None and len(items) >= limit:
                return items[:limit]
            next_url = r.links.get("next", {}).get("url")
            # The next link already carries the query string
            next_params = None
        self._logger.debug("GitHubApiClient: collected %d items for %s", len(items), resource)
        return items

    # ------------------------------------------------------------------
    # Users & meta
    # ------------------------------------------------------------------

    async def get_authenticated_user(self) -> User:
        return await self._get_model("/user", User, resource="authenticated user")

    async def get_rate_limit(self) -> RateLimit:
        r = await self._request("GET", "/rate_limit", resource="rate limit")
        data = r.json()
        core = (data.get("resources") or {}).get("core") if isinstance(data, dict) else None
        if core is None:
            core = data.get("rate") if isinstance(data, dict) else None
        if core is None:
            raise GitHubApiError("Unexpected response shape from rate_limit", status_code=r.status_code, details=data)
        return RateLimit.model_validate(core)

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    async def get_repository(self, owner: str, repo: str) -> Repository:
        return await self._get_model(f"/repos/{owner}/{repo}", Repository, resource=f"repository {owner}/{repo}")

    async def list_repositories(self, owner: str, *, per_page: int = 30, limit: Optional[int] = 30) -> List[Repository]:
        params = {"per_page": _clamp_per_page(per_page), "sort": "updated"}
        try:
            raw = await self._paginate(f"/users/{owner}/repos", resource=f"repositories of {owner}", params=params, limit=limit)
        except GitHubNotFoundError:
            self._logger.debug("GitHubApiClient.list_repositories: %s is not a user, trying orgs", owner)
            raw = await self._paginate(f"/orgs/{owner}/repos", resource=f"repositories of {owner}", params=params, limit=limit)
        return [Repository.model_validate(item) for item in raw]

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def list_issues(
        self,
        owner: str,
        repo: str,
        *,
        state: str = "open",
        labels: Optional[List[str]] = None,
        per_page: int = 30,
        limit: Optional[int] = 30,
    ) -> List[Issue]:
        params: Dict[str, Any] = {"state": state, "per_page": _clamp_per_page(per_page)}
        if labels:
            params["labels"] = ",".join(labels)
        issues: List[Issue] = []
        next_url: Optional[str] = f"/repos/{owner}/{repo}/issues"
        next_params: Optional[Dict[str, Any]] = params
        # Pull requests come back from this endpoint too; page until enough real issues are found
        while next_url:
            r = await self._request("GET", next_url, resource=f"issues of {owner}/{repo}", params=next_params)
            for item in r.json():
                issue = Issue.model_validate(item)
                if issue.is_pull_request:
                    continue
                issues.append(issue)
                if limit is not None and len(issues) >= limit:
                    return issues
            next_url = r.links.get("next", {}).get("url")
            next_params = None
        return issues

    async def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        return await self._get_model(
            f"/repos/{owner}/{repo}/issues/{number}", Issue, resource=f"issue {owner}/{repo}#{number}"
        )

    async def create_issue(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        body: Optional[str] = None,
        labels: Optional[List[str]] = None,
        assignees: Optional[List[str]] = None,
    ) -> Issue:
        payload: Dict[str, Any] = {"title": title}
        if body is not None:
            payload["body"] = body
        if labels:
            payload["labels"] = list(labels)
        if assignees:
            payload["assignees"] = list(assignees)
        self._logger.debug("GitHubApiClient.create_issue: %s/%s title=%s", owner, repo, title)
        r = await self._request("POST", f"/repos/{owner}/{repo}/issues", resource=f"issues of {owner}/{repo}", json=payload)
        return Issue.model_validate(r.json())

    async def create_issue_comment(self, owner: str, repo: str, number: int, *, body: str) -> IssueComment:
        r = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            resource=f"issue {owner}/{repo}#{number}",
            json={"body": body},
        )
        return IssueComment.model_validate(r.json())

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        *,
        state: str = "open",
        per_page: int = 30,
        limit: Optional[int] = 30,
    ) -> List[PullRequest]:
        params = {"state": state, "per_page": _clamp_per_page(per_page)}
        raw = await self._paginate(
            f"/repos/{owner}/{repo}/pulls", resource=f"pull requests of {owner}/{repo}", params=params, limit=limit
        )
        return [PullRequest.model_validate(item) for item in raw]

    async def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequest:
        return await self._get_model(
            f"/repos/{owner}/{repo}/pulls/{number}", PullRequest, resource=f"pull request {owner}/{repo}#{number}"
        )

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    async def get_file_contents(self, owner: str, repo: str, path: str, *, ref: Optional[str] = None) -> FileContent:
        resource = f"file {owner}/{repo}:{path}"
        params = {"ref": ref} if ref else None
        r = await self._request("GET", f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}", resource=resource, params=params)
        data = r.json()
        if isinstance(data, list) or not isinstance(data, dict) or data.get("type") not in (None, "file"):
            raise GitHubApiError(f"Path is not a file: {resource}", status_code=r.status_code)
        raw = data.get("content") or ""
        if data.get("encoding") == "base64":
            decoded = base64.b64decode(raw.encode("ascii"))
            try:
                text = decoded.decode("utf-8")
                encoding = "utf-8"
            except UnicodeDecodeError:
                text = base64.b64encode(decoded).decode("ascii")
                encoding = "base64"
        else:
            text = raw
            encoding = data.get("encoding") or "utf-8"
        return FileContent.model_validate(
            {
                "name": data.get("name"),
                "path": data.get("path"),
                "sha": data.get("sha"),
                "size": data.get("size", len(text)),
                "html_url": data.get("html_url"),
                "encoding": encoding,
                "content": text,
            }
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search_repositories(
        self,
        query: str,
        *,
        sort: Optional[str] = None,
        order: str = "desc",
        per_page: int = 30,
    ) -> SearchResult[Repository]:
        params: Dict[str, Any] = {"q": query, "order": order, "per_page": _clamp_per_page(per_page)}
        if sort:
            params["sort"] = sort
        return await self._get_model(
            "/search/repositories", SearchResult[Repository], resource="repository search", params=params
        )

    async def search_issues(self, query: str, *, per_page: int = 30) -> SearchResult[Issue]:
        params = {"q": query, "per_page": _clamp_per_page(per_page)}
        return await self._get_model("/search/issues", SearchResult[Issue], resource="issue search", params=params)
