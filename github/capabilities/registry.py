from __future__ import annotations

"""Capability registry.

Resolves the capability names the CLI and the REST API receive (plain strings
such as ``"issue.list"``) to the objects that run them.
"""

from typing import Dict, List, Union

from .base import Capability, CapabilityName, CapabilitySpec


def _key(name: Union[CapabilityName, str]) -> str:
    return name.value if isinstance(name, CapabilityName) else str(name)


class CapabilityRegistry:
    """
    Name -> capability lookup table.

    ``CapabilityName`` members and their string values address the same entry.
    Registering a name twice keeps the later capability. ``get`` raises
    ``KeyError`` for unknown names; callers that take names from users check
    ``has`` first.
    """

    def __init__(self) -> None:
        self._caps: Dict[str, Capability] = {}

    def register(self, cap: Capability) -> None:
        self._caps[_key(cap.name)] = cap

    def get(self, name: Union[CapabilityName, str]) -> Capability:
        return self._caps[_key(name)]

    def has(self, name: Union[CapabilityName, str]) -> bool:
        return _key(name) in self._caps

    def names(self) -> List[str]:
        """Registered capability names, sorted."""
        return sorted(self._caps)

    def specs(self) -> List[CapabilitySpec]:
        """Specs of every registered capability, sorted by name."""
        return [self._caps[name].spec for name in self.names()]

    def __len__(self) -> int:
        return len(self._caps)
