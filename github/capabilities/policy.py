"""Access policy for capability invocation.

Defines ``CapabilityPolicy`` (an allow-list plus a read-only switch) and
``enforce_policy`` which the capability service calls before every
invocation.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from github.core.config import PolicyConfig
from github.core.errors import CapabilityAccessDeniedError

from .base import CapabilitySpec


class CapabilityPolicy(BaseModel):
    """Access policy applied to every caller of this server.

    Usage guidelines:
    - ``allowed_capabilities``: If set, only those capability names may run.
    - ``read_only``: When True, capabilities whose spec is not read-only are rejected.
    """

    allowed_capabilities: Optional[set[str]] = Field(
        default=None,
        description="If provided, only these capability names may be invoked. If None, all are allowed.",
    )
    read_only: bool = Field(
        default=False,
        description="If True, capabilities that modify GitHub state are rejected.",
    )

    @classmethod
    def from_config(cls, config: PolicyConfig) -> "CapabilityPolicy":
        allowed = set(config.allowed_capabilities) if config.allowed_capabilities else None
        return cls(allowed_capabilities=allowed, read_only=config.read_only)

    def is_allowed(self, name: str) -> bool:
        return self.allowed_capabilities is None or name in self.allowed_capabilities


def enforce_policy(policy: Optional[CapabilityPolicy], spec: CapabilitySpec) -> None:
    """Raise ``CapabilityAccessDeniedError`` if ``policy`` disallows ``spec``.

    Args:
        policy: Active policy. ``None`` allows everything.
        spec: Spec of the capability about to run.

    Raises:
        CapabilityAccessDeniedError: If the capability is not allow-listed, or
            mutates GitHub while the policy is read-only.
    """
    if policy is None:
        return
    if not policy.is_allowed(spec.name):
        raise CapabilityAccessDeniedError(spec.name, "not in the allowed capabilities")
    if policy.read_only and not spec.read_only:
        raise CapabilityAccessDeniedError(spec.name, "server is read-only")
