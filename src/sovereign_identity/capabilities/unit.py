"""Unit — base class for components that teach and learn capabilities."""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

from sovereign_identity.capabilities.capability import (
    CapabilityRegistry,
    TeachingContract,
)
from sovereign_identity.errors import CapabilityMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitSchema:
    """Identity of a unit type: its id (the teaching namespace) and version."""

    id: str
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("UnitSchema.id must not be empty.")

    def __str__(self) -> str:
        return f"{self.id}@{self.version}"


class Unit(ABC):
    """A component with its own capability registry.

    Subclasses describe themselves through :meth:`whoami` and publish what
    they can do through :meth:`teach`. Anything they learn from other units
    is reachable through :meth:`can` and :meth:`execute`.
    """

    def __init__(self, dna: UnitSchema) -> None:
        self._dna = dna
        self._capabilities = CapabilityRegistry()

    @property
    def dna(self) -> UnitSchema:
        return self._dna

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def learn(self, contracts: Iterable[TeachingContract]) -> list[str]:
        """Import the capabilities of each contract into this unit's registry.

        Returns
        -------
        list[str]
            Namespaced capability names that were learned.
        """
        learned = self._capabilities.learn_all(contracts)
        logger.debug("%s learned %d capabilities: %s", self._dna, len(learned), learned)
        return learned

    def can(self, capability: str) -> bool:
        """Return True when *capability* (namespaced) has been learned."""
        return capability in self._capabilities

    def capabilities(self) -> list[str]:
        """Return the namespaced names of all learned capabilities."""
        return self._capabilities.names()

    async def execute(self, capability: str, *args: Any) -> Any:
        """Invoke a learned capability with positional *args*.

        Coroutine results are awaited before being returned.

        Raises
        ------
        CapabilityMissingError
            If *capability* has not been learned.
        """
        fn = self._capabilities.get(capability)
        if fn is None:
            raise CapabilityMissingError(self._dna.id, capability)
        outcome = fn(*args)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome

    # ------------------------------------------------------------------
    # Self-description
    # ------------------------------------------------------------------

    @abstractmethod
    def whoami(self) -> str:
        """Return a one-line human-readable description of this unit."""

    @abstractmethod
    def teach(self) -> TeachingContract:
        """Return the contract other units may learn from this one."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dna={str(self._dna)!r}, learned={len(self._capabilities)})"


__all__ = ["Unit", "UnitSchema"]
