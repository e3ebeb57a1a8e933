from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any, AsyncGenerator, Callable, Dict, Iterable, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

# CI runners export GITHUB_* variables of their own (GITHUB_ENV is a file path there);
# pin the ones Settings reads before any application module is imported.
for _name in (
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "GITHUB_LOG_LEVEL",
    "GITHUB_READ_ONLY",
    "GITHUB_ALLOWED_CAPABILITIES",
    "GITHUB_CACHE_TTL",
    "GITHUB_API_PORT",
    "GITHUB_API_HOST",
):
    os.environ.pop(_name, None)
os.environ["GITHUB_ENV"] = "production"
os.environ["GITHUB_ENABLE_FILE_LOGGING"] = "false"

from github.client import GitHubApiClient  # noqa: E402
from github.core.config import get_settings  # noqa: E402
from github.service import CapabilityService, ResultCache  # noqa: E402

MOCK_BASE_URL = "http://mock"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://testserver",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =====================================================================
# Fake GitHub
# =====================================================================


class MockGitHub:
    """Route table backing an ``httpx.MockTransport`` that imitates api.github.com."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        status: int = 200,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json=json, headers=headers)

        self.routes[(method.upper(), path)] = handler

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method.upper(), path)] = handler

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, *, token: Optional[str] = "test-token") -> GitHubApiClient:
        http = httpx.AsyncClient(transport=self.transport())
        return GitHubApiClient(MOCK_BASE_URL, token=token, client=http)


@pytest.fixture
def mock_github() -> MockGitHub:
    return MockGitHub()


@pytest_asyncio.fixture
async def github_client(mock_github: MockGitHub) -> AsyncGenerator[GitHubApiClient, None]:
    client = mock_github.client()
    yield client
    await client._client.aclose()


@pytest.fixture
def capability_service(github_client: GitHubApiClient) -> CapabilityService:
    return CapabilityService(github_client, cache=ResultCache(ttl=60))


# =====================================================================
# GitHub payloads
# =====================================================================


def _user(login: str = "octocat", user_id: int = 1) -> Dict[str, Any]:
    return {
        "login": login,
        "id": user_id,
        "type": "User",
        "html_url": f"https://github.com/{login}",
        "site_admin": False,
    }


def _repo(owner: str = "octocat", name: str = "hello-world", repo_id: int = 1296269) -> Dict[str, Any]:
    return {
        "id": repo_id,
        "node_id": "MDEwOlJlcG9zaXRvcnkxMjk2MjY5",
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": _user(owner),
        "private": False,
        "html_url": f"https://github.com/{owner}/{name}",
        "description": "My first repository",
        "fork": False,
        "default_branch": "main",
        "language": "Python",
        "stargazers_count": 80,
        "forks_count": 9,
        "open_issues_count": 2,
        "archived": False,
        "topics": ["demo"],
        "created_at": "2011-01-26T19:01:12Z",
        "updated_at": "2011-01-26T19:14:43Z",
        "pushed_at": "2011-01-26T19:06:43Z",
    }


def _issue(number: int = 1, *, title: str = "Found a bug", pull: bool = False, owner: str = "octocat") -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": 1000 + number,
        "number": number,
        "title": title,
        "state": "open",
        "html_url": f"https://github.com/{owner}/hello-world/issues/{number}",
        "body": "I'm having a problem with this.",
        "user": _user(owner),
        "labels": [{"id": 1, "name": "bug", "color": "f29513", "description": "Something isn't working"}],
        "assignees": [],
        "comments": 0,
        "created_at": "2011-04-22T13:33:48Z",
        "updated_at": "2011-04-22T13:33:48Z",
        "closed_at": None,
    }
    if pull:
        data["pull_request"] = {"url": f"https://api.github.com/repos/{owner}/hello-world/pulls/{number}"}
    return data


def _pull(number: int = 7, *, title: str = "Amazing new feature") -> Dict[str, Any]:
    return {
        "id": 2000 + number,
        "number": number,
        "title": title,
        "state": "open",
        "html_url": f"https://github.com/octocat/hello-world/pull/{number}",
        "body": "Please pull these awesome changes in!",
        "user": _user(),
        "draft": False,
        "merged_at": None,
        "head": {"label": "octocat:new-topic", "ref": "new-topic", "sha": "6dcb09b5b57875f334f61aebed695e2e4193db5e"},
        "base": {"label": "octocat:main", "ref": "main", "sha": "6dcb09b5b57875f334f61aebed695e2e4193db5e"},
        "created_at": "2011-01-26T19:01:12Z",
        "updated_at": "2011-01-26T19:01:12Z",
    }


@pytest.fixture
def payloads() -> SimpleNamespace:
    """Factories for realistic GitHub REST payloads."""
    return SimpleNamespace(user=_user, repo=_repo, issue=_issue, pull=_pull)


# =====================================================================
# REST app
# =====================================================================


@pytest_asyncio.fixture
async def rest_client(capability_service: CapabilityService) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client for a REST app serving ``capability_service``."""
    from github.interfaces.rest.main import create_app

    application = create_app(service=capability_service)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=application), base_url="http://localhost") as client:
        yield client
