"""Teaching contracts and the per-unit capability registry.

A unit *teaches* by publishing a :class:`TeachingContract`: its unit id plus
a mapping of capability name to callable. Another unit *learns* the
contract into its own :class:`CapabilityRegistry`, where each callable is
stored under the namespaced key ``"<unit_id>.<capability>"`` (for example
``"signer.sign"``).

The registry is a plain strategy table. It does not check argument types;
caller and callee agree on positional arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

CapabilityFn = Callable[..., Any]


def capability_key(unit_id: str, capability: str) -> str:
    """Return the namespaced registry key for *capability* taught by *unit_id*."""
    return f"{unit_id}.{capability}"


@dataclass(frozen=True)
class TeachingContract:
    """The set of capabilities one unit offers to others.

    Parameters
    ----------
    unit_id:
        Namespace under which learners store the capabilities
        (e.g. ``"signer"``, ``"credential"``).
    capabilities:
        Capability name to callable. Callables may be sync or async.
    """

    unit_id: str
    capabilities: Mapping[str, CapabilityFn] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.unit_id:
            raise ValueError("TeachingContract.unit_id must not be empty.")
        for name, fn in self.capabilities.items():
            if not name:
                raise ValueError("TeachingContract capability names must not be empty.")
            if not callable(fn):
                raise ValueError(
                    f"Capability {name!r} taught by {self.unit_id!r} is not callable."
                )

    def qualified_names(self) -> list[str]:
        """Return the namespaced keys this contract produces when learned."""
        return [capability_key(self.unit_id, name) for name in self.capabilities]


class CapabilityRegistry:
    """Mapping of namespaced capability key to callable.

    Learning a contract whose keys already exist replaces the earlier
    entries, so the most recently learned contract wins.
    """

    def __init__(self) -> None:
        self._table: dict[str, CapabilityFn] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def register(self, name: str, fn: CapabilityFn) -> None:
        """Store *fn* under the fully qualified *name*.

        Raises
        ------
        ValueError
            If *name* is not of the form ``"<unit_id>.<capability>"`` or
            *fn* is not callable.
        """
        unit_id, _, capability = name.partition(".")
        if not unit_id or not capability:
            raise ValueError(
                f"Capability name {name!r} must be namespaced as '<unit_id>.<capability>'."
            )
        if not callable(fn):
            raise ValueError(f"Capability {name!r} is not callable.")
        self._table[name] = fn

    def learn(self, contract: TeachingContract) -> list[str]:
        """Import every capability of *contract*.

        Returns
        -------
        list[str]
            The namespaced keys that were stored.
        """
        learned: list[str] = []
        for capability, fn in contract.capabilities.items():
            name = capability_key(contract.unit_id, capability)
            self._table[name] = fn
            learned.append(name)
        return learned

    def learn_all(self, contracts: Iterable[TeachingContract]) -> list[str]:
        """Import several contracts in order."""
        learned: list[str] = []
        for contract in contracts:
            learned.extend(self.learn(contract))
        return learned

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[CapabilityFn]:
        """Return the callable stored under *name*, or None."""
        return self._table.get(name)

    def names(self) -> list[str]:
        """Return all stored keys in learning order."""
        return list(self._table.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"CapabilityRegistry(capabilities={len(self._table)})"


__all__ = ["CapabilityFn", "CapabilityRegistry", "TeachingContract", "capability_key"]
