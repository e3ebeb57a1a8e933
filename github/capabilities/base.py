from __future__ import annotations

"""Capability protocol, metadata and execution data models.

A capability is a named GitHub operation shared by the CLI and the REST API.

Each implementation publishes a ``CapabilitySpec`` describing its parameters.
The service validates caller arguments against that spec with
``validate_args`` before the capability runs, so implementations can index
``args`` directly.

Capabilities should:

- return JSON-serialisable structured outputs in ``CapabilityResult.output``,
- let ``GitHubApiError`` propagate to the interface layer,
- avoid performing policy decisions themselves (policy is enforced by the
  service before invocation).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from github.core.errors import CapabilityArgumentError


class CapabilityName(str, Enum):
    """Logical names of the built-in capabilities."""

    user_me = "user.me"
    rate_limit_get = "rate_limit.get"
    repo_get = "repo.get"
    repo_list = "repo.list"
    issue_list = "issue.list"
    issue_get = "issue.get"
    issue_create = "issue.create"
    issue_comment = "issue.comment"
    pull_list = "pull.list"
    pull_get = "pull.get"
    file_get = "file.get"
    search_repositories = "search.repositories"
    search_issues = "search.issues"


class ParamType(str, Enum):
    string = "str"
    integer = "int"
    boolean = "bool"
    string_list = "list"


@dataclass(frozen=True)
class CapabilityParam:
    """One named argument accepted by a capability."""

    name: str
    type: ParamType = ParamType.string
    required: bool = False
    description: str = ""
    default: Any = None
    choices: Optional[Tuple[str, ...]] = None
    # Inclusive bounds for integer params
    minimum: Optional[int] = None
    maximum: Optional[int] = None


@dataclass(frozen=True)
class CapabilitySpec:
    """Public description of a capability.

    Attributes
    ----------
    name:
        Logical capability name, for example ``repo.get``.
    description:
        One line shown by ``github capabilities`` and the REST listing.
    read_only:
        ``False`` for capabilities that change state on GitHub.
    params:
        Accepted arguments, in display order.
    """

    name: str
    description: str
    read_only: bool = True
    params: Tuple[CapabilityParam, ...] = field(default_factory=tuple)

    def param(self, name: str) -> Optional[CapabilityParam]:
        for p in self.params:
            if p.name == name:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "read_only": self.read_only,
            "params": [
                {
                    "name": p.name,
                    "type": p.type.value,
                    "required": p.required,
                    "description": p.description,
                    "default": p.default,
                    "choices": list(p.choices) if p.choices else None,
                    "minimum": p.minimum,
                    "maximum": p.maximum,
                }
                for p in self.params
            ],
        }


@dataclass(frozen=True)
class CapabilityContext:
    """Execution context passed to capability implementations.

    Attributes
    ----------
    client:
        The shared ``GitHubApiClient``.
    settings:
        The active ``Settings`` instance, or ``None`` in isolated tests.
    """

    client: Any
    settings: Any = None


@dataclass(frozen=True)
class CapabilityResult:
    """Structured capability execution result."""

    ok: bool
    output: Dict[str, Any]


class Capability(Protocol):
    """Protocol for capability implementations."""

    name: CapabilityName
    spec: CapabilitySpec

    async def execute(self, ctx: CapabilityContext, *, args: Dict[str, Any]) -> CapabilityResult: ...


_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}


def _coerce(spec: CapabilitySpec, param: CapabilityParam, value: Any) -> Any:
    def fail(expected: str) -> CapabilityArgumentError:
        return CapabilityArgumentError(spec.name, f"'{param.name}' must be {expected}, got {value!r}")

    if param.type is ParamType.integer:
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise fail("an integer")
        try:
            number = int(value.strip()) if isinstance(value, str) else value
        except ValueError:
            raise fail("an integer") from None
        if param.minimum is not None and number < param.minimum:
            raise fail(f"at least {param.minimum}")
        if param.maximum is not None and number > param.maximum:
            raise fail(f"at most {param.maximum}")
        return number

    if param.type is ParamType.boolean:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE:
            return True
        if isinstance(value, str) and value.strip().lower() in _FALSE:
            return False
        raise fail("a boolean")

    if param.type is ParamType.string_list:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, (list, tuple)) and all(isinstance(v, (str, int)) for v in value):
            return [str(v) for v in value]
        raise fail("a list of strings")

    if isinstance(value, (dict, list, tuple)) or value is None:
        raise fail("a string")
    text = str(value)
    if param.choices and text not in param.choices:
        raise fail(f"one of {', '.join(param.choices)}")
    return text


def validate_args(spec: CapabilitySpec, args: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Check and coerce ``args`` against ``spec``.

    - ``repo="owner/name"`` is split when ``spec`` takes both ``owner`` and ``repo``
      and no ``owner`` was given.
    - Unknown argument names are rejected.
    - Missing required arguments are rejected; missing optional ones get their default.

    Returns:
        A new dict with exactly the parameters of ``spec`` (optional ones without a
        default are omitted).

    Raises:
        CapabilityArgumentError: On any mismatch.
    """
    given: Dict[str, Any] = dict(args or {})

    if spec.param("owner") and spec.param("repo") and not given.get("owner"):
        full = given.get("repo")
        if isinstance(full, str) and "/" in full:
            owner, _, repo = full.partition("/")
            if not owner or not repo or "/" in repo:
                raise CapabilityArgumentError(spec.name, f"'repo' must look like 'owner/name', got {full!r}")
            given["owner"], given["repo"] = owner, repo

    unknown = sorted(set(given) - {p.name for p in spec.params})
    if unknown:
        raise CapabilityArgumentError(spec.name, f"unknown argument(s): {', '.join(unknown)}")

    clean: Dict[str, Any] = {}
    missing: List[str] = []
    for param in spec.params:
        value = given.get(param.name)
        if value is None or (isinstance(value, str) and not value.strip() and param.type is not ParamType.string_list):
            if param.required:
                missing.append(param.name)
            elif param.default is not None:
                clean[param.name] = param.default
            continue
        clean[param.name] = _coerce(spec, param, value)

    if missing:
        raise CapabilityArgumentError(spec.name, f"missing required argument(s): {', '.join(missing)}")
    return clean
