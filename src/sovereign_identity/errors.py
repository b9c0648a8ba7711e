"""Error taxonomy for identity construction and delegated operations.

Collaborator units raise these; :class:`~sovereign_identity.identity.Identity`
catches them and returns them as the ``cause`` of a failed
:class:`~sovereign_identity.result.Result`.
"""
from __future__ import annotations


class IdentityError(Exception):
    """Base class for all identity errors."""


class ConfigValidationError(IdentityError, ValueError):
    """Raised when required identity configuration fields are missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing: list[str] = list(missing or [])


class KeyConversionError(IdentityError, ValueError):
    """Raised when key material cannot be decoded or re-encoded."""


class ComponentConstructionError(IdentityError):
    """Raised when a component refuses to build from the given material."""


class CredentialIssuanceError(IdentityError):
    """Raised when a credential cannot be produced or signed."""


class CapabilityMissingError(IdentityError, LookupError):
    """Raised when an operation has neither a learned capability nor a bound component."""

    def __init__(self, unit_id: str, capability: str, hint: str = "") -> None:
        message = f"[{unit_id}] Cannot {capability.split('.')[-1]} - missing {capability!r} capability."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.unit_id = unit_id
        self.capability = capability


__all__ = [
    "CapabilityMissingError",
    "ComponentConstructionError",
    "ConfigValidationError",
    "CredentialIssuanceError",
    "IdentityError",
    "KeyConversionError",
]
