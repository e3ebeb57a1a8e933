"""Capability service shared by the CLI and the REST API.

``CapabilityService`` is the single entry point both interfaces use to run a
capability. An invocation goes through, in order: registry lookup, policy
check, argument validation, the read-only result cache, and finally the
capability itself.
"""

from __future__ import annotations

import asyncio
import copy
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from github.capabilities import (
    CapabilityContext,
    CapabilityPolicy,
    CapabilityRegistry,
    CapabilitySpec,
    build_default_registry,
    enforce_policy,
    validate_args,
)
from github.client import GitHubApiClient
from github.core.config import Settings
from github.core.errors import CapabilityNotFoundError
from github.core.logging_config import get_logger

logger = get_logger(__name__)


class ResultCache:
    """TTL cache for read-only capability results.

    Entries are copied on the way in and out, so callers may mutate what they get.

    Attributes:
        max_size: Maximum number of entries (0 = unlimited); oldest entry is evicted first
        ttl: Time-to-live in seconds; ``0`` disables caching
    """

    def __init__(self, ttl: float = 30.0, max_size: int = 256) -> None:
        self._entries: Dict[str, Tuple[Dict[str, Any], float]] = {}
        self._ttl = ttl
        self._max_size = max_size
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    @staticmethod
    def key_for(name: str, args: Dict[str, Any]) -> str:
        return f"{name}:{json.dumps(args, sort_keys=True, default=str)}"

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        if not self.enabled:
            return None
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            output, expires_at = entry
            if expires_at <= time.monotonic():
                self._entries.pop(key, None)
                return None
            return copy.deepcopy(output)

    async def set(self, key: str, output: Dict[str, Any]) -> None:
        if not self.enabled:
            return
        async with self._lock:
            if key not in self._entries and self._max_size > 0 and len(self._entries) >= self._max_size:
                # Remove oldest entry (simple FIFO)
                oldest_key = next(iter(self._entries))
                self._entries.pop(oldest_key)
            self._entries[key] = (copy.deepcopy(output), time.monotonic() + self._ttl)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def size(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class InvocationResult:
    """Outcome of one capability invocation as reported to callers."""

    capability: str
    ok: bool
    output: Dict[str, Any]
    cached: bool = False
    duration_ms: float = 0.0


class CapabilityService:
    """
    Run capabilities on behalf of the CLI and the REST API.

    GitHub API errors and capability errors propagate to the caller; each
    interface maps them to its own error surface.
    """

    def __init__(
        self,
        client: GitHubApiClient,
        *,
        registry: Optional[CapabilityRegistry] = None,
        policy: Optional[CapabilityPolicy] = None,
        cache: Optional[ResultCache] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.client = client
        self.registry = registry if registry is not None else build_default_registry()
        self.policy = policy or CapabilityPolicy()
        self.cache = cache if cache is not None else ResultCache(ttl=0)
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings, *, client: Optional[GitHubApiClient] = None) -> "CapabilityService":
        return cls(
            client or GitHubApiClient.from_config(settings.github),
            policy=CapabilityPolicy.from_config(settings.policy),
            cache=ResultCache(ttl=settings.cache_ttl, max_size=settings.cache_max_size),
            settings=settings,
        )

    def get_spec(self, name: str) -> CapabilitySpec:
        if not self.registry.has(name):
            raise CapabilityNotFoundError(name)
        return self.registry.get(name).spec

    def describe(self) -> List[Dict[str, Any]]:
        """Specs of the capabilities the policy allow-lists.

        Mutating capabilities stay listed under a read-only policy but carry
        ``"enabled": False``.
        """
        described: List[Dict[str, Any]] = []
        for spec in self.registry.specs():
            if not self.policy.is_allowed(spec.name):
                continue
            item = spec.to_dict()
            item["enabled"] = spec.read_only or not self.policy.read_only
            described.append(item)
        return described

    async def invoke(self, name: str, args: Optional[Dict[str, Any]] = None) -> InvocationResult:
        """
        Run capability ``name`` with ``args``.

        Raises:
            CapabilityNotFoundError: Unknown capability.
            CapabilityAccessDeniedError: Rejected by the policy.
            CapabilityArgumentError: Arguments do not match the capability spec.
            GitHubApiError: GitHub call failed.
        """
        spec = self.get_spec(name)
        enforce_policy(self.policy, spec)
        clean = validate_args(spec, args)

        started = time.perf_counter()
        key = ResultCache.key_for(spec.name, clean)
        if spec.read_only:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug("Capability %s served from cache", spec.name)
                return InvocationResult(capability=spec.name, ok=True, output=cached, cached=True)

        logger.info("Invoking capability %s args=%s", spec.name, sorted(clean))
        capability = self.registry.get(spec.name)
        ctx = CapabilityContext(client=self.client, settings=self.settings)
        result = await capability.execute(ctx, args=clean)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        if spec.read_only:
            if result.ok:
                await self.cache.set(key, result.output)
        else:
            await self.cache.clear()
        logger.debug("Capability %s finished ok=%s in %.2fms", spec.name, result.ok, duration_ms)
        return InvocationResult(
            capability=spec.name, ok=result.ok, output=result.output, cached=False, duration_ms=duration_ms
        )

    async def close(self) -> None:
        await self.client.aclose()

