"""Capability registry and capability metadata.

A *capability* is a named GitHub operation, for example ``repo.get`` or
``issue.create``. The CLI and the REST API both reach GitHub only through
capabilities:

- The interface receives a capability name and loose arguments.
- ``CapabilityService`` resolves the name through ``CapabilityRegistry``,
  enforces ``CapabilityPolicy`` and validates arguments against the
  capability's ``CapabilitySpec``.
- The capability runs with a ``CapabilityContext`` holding the shared
  ``GitHubApiClient``.

This package exports:

- ``Capability``: protocol for async capability execution.
- ``CapabilityRegistry``: name -> capability implementation mapping.
- ``CapabilitySpec``/``CapabilityParam``: public capability descriptions.
- ``CapabilityContext``/``CapabilityResult``: execution input/output models.
- ``CapabilityPolicy``/``enforce_policy``: access control.
"""

from .base import (
    Capability,
    CapabilityContext,
    CapabilityName,
    CapabilityParam,
    CapabilityResult,
    CapabilitySpec,
    ParamType,
    validate_args,
)
from .builtin import build_default_registry
from .policy import CapabilityPolicy, enforce_policy
from .registry import CapabilityRegistry

__all__ = [
    "Capability",
    "CapabilityContext",
    "CapabilityName",
    "CapabilityParam",
    "CapabilityPolicy",
    "CapabilityRegistry",
    "CapabilityResult",
    "CapabilitySpec",
    "ParamType",
    "build_default_registry",
    "enforce_policy",
    "validate_args",
]
