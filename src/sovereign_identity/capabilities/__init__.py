"""Capability teaching and learning between identity components."""

from __future__ import annotations

from sovereign_identity.capabilities.capability import (
    CapabilityFn,
    CapabilityRegistry,
    TeachingContract,
    capability_key,
)
from sovereign_identity.capabilities.unit import Unit, UnitSchema

__all__ = [
    "CapabilityFn",
    "CapabilityRegistry",
    "TeachingContract",
    "Unit",
    "UnitSchema",
    "capability_key",
]
