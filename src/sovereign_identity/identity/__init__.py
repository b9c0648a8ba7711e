"""The composite Identity unit and its record shapes."""
from __future__ import annotations

from sovereign_identity.identity.identity import IDENTITY_VERSION, Identity
from sovereign_identity.identity.records import (
    DEFAULT_KEY_TYPE,
    DEFAULT_PROVIDER,
    IdentityConfig,
    IdentityDescription,
    IdentityPresent,
    IdentityRecord,
    PublicIdentity,
)

__all__ = [
    "DEFAULT_KEY_TYPE",
    "DEFAULT_PROVIDER",
    "IDENTITY_VERSION",
    "Identity",
    "IdentityConfig",
    "IdentityDescription",
    "IdentityPresent",
    "IdentityRecord",
    "PublicIdentity",
]
