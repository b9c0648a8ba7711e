"""Identity data shapes: construction input, domain record, and projections.

``IdentityConfig``
    Input to :meth:`Identity.create`. :meth:`IdentityConfig.parse` is the
    only place defaults are filled and required fields are checked.
``IdentityRecord``
    The persisted form: every canonical field, including the
    private key hex when present.
``PublicIdentity``
    The domain record without the private key. The field is not declared
    on the model, so it cannot be set.
``IdentityPresent``
    ``did``, ``public_key_hex`` and ``credential`` only.

All models accept and emit the camelCase wire names (``publicKeyHex``,
``createdAt``) alongside the Python field names.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sovereign_identity.did.credentials import VerifiableCredential
from sovereign_identity.errors import ConfigValidationError
from sovereign_identity.result import Result

DEFAULT_PROVIDER = "did:key"
DEFAULT_KEY_TYPE = "Ed25519"

REQUIRED_FIELDS: tuple[str, ...] = ("alias", "did", "public_key_hex", "private_key_hex")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _empty_credential_to_none(value: Any) -> Any:
    # Stores written by older clients persist a missing credential as {}.
    if isinstance(value, Mapping) and not value:
        return None
    return value


# ------------------------------------------------------------------
# IdentityConfig
# ------------------------------------------------------------------


class IdentityConfig(BaseModel):
    """Validated construction input for an identity.

    Build through :meth:`parse`, which reports missing required fields as a
    failed :class:`~sovereign_identity.result.Result` instead of raising.

    Defaults
    --------
    - ``kid``: the public key hex
    - ``provider``: ``"did:key"``
    - ``metadata``: empty
    - ``created_at``: now (UTC)
    - ``credential``: ``None``
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    alias: str = ""
    did: str = ""
    public_key_hex: str = Field(default="", alias="publicKeyHex")
    private_key_hex: Optional[str] = Field(default=None, alias="privateKeyHex")
    kid: Optional[str] = None
    provider: str = DEFAULT_PROVIDER
    credential: Optional[VerifiableCredential] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    @field_validator("alias", "did", "public_key_hex", mode="before")
    @classmethod
    def coerce_missing_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    @field_validator("private_key_hex", "kid", mode="before")
    @classmethod
    def coerce_blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("provider", mode="before")
    @classmethod
    def default_provider(cls, value: Any) -> Any:
        return value or DEFAULT_PROVIDER

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("created_at", mode="before")
    @classmethod
    def default_created_at(cls, value: Any) -> Any:
        return _utcnow() if value is None else value

    @field_validator("credential", mode="before")
    @classmethod
    def empty_credential(cls, value: Any) -> Any:
        return _empty_credential_to_none(value)

    @model_validator(mode="after")
    def default_kid(self) -> "IdentityConfig":
        if not self.kid:
            self.kid = self.public_key_hex
        return self

    def missing_fields(self, require_private_key: bool = True) -> list[str]:
        """Return the required fields that are absent or empty."""
        required = REQUIRED_FIELDS if require_private_key else REQUIRED_FIELDS[:-1]
        return [name for name in required if not getattr(self, name)]

    @classmethod
    def parse(
        cls,
        data: Union["IdentityConfig", BaseModel, Mapping[str, Any]],
        *,
        require_private_key: bool = True,
    ) -> Result["IdentityConfig"]:
        """Validate *data* into an :class:`IdentityConfig`.

        Parameters
        ----------
        data:
            An existing config, any identity record model, or a mapping
            using either snake_case or camelCase keys.
        require_private_key:
            When False, ``private_key_hex`` may be absent (verify-only
            reconstruction).

        Returns
        -------
        Result[IdentityConfig]
            Failure with a :class:`ConfigValidationError` cause naming every
            missing requirement, or describing the first type error.
        """
        try:
            if isinstance(data, IdentityConfig):
                config = data
            elif isinstance(data, BaseModel):
                config = cls.model_validate(data.model_dump())
            elif isinstance(data, Mapping):
                config = cls.model_validate(dict(data))
            else:
                raise TypeError(f"expected a mapping or identity record, got {type(data).__name__}")
        except (ValidationError, TypeError) as exc:
            error = ConfigValidationError(f"Invalid identity configuration: {exc}")
            error.__cause__ = exc
            return Result.fail(str(error), error)

        missing = config.missing_fields(require_private_key)
        if missing:
            required = REQUIRED_FIELDS if require_private_key else REQUIRED_FIELDS[:-1]
            message = f"Required fields: {', '.join(required)}. Missing: {', '.join(missing)}"
            return Result.fail(message, ConfigValidationError(message, missing))
        return Result.success(config)


# ------------------------------------------------------------------
# Domain record and projections
# ------------------------------------------------------------------


class _IdentityFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    alias: str
    did: str
    kid: str
    public_key_hex: str = Field(alias="publicKeyHex")
    provider: str
    credential: Optional[VerifiableCredential] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(alias="createdAt")

    @field_validator("credential", mode="before")
    @classmethod
    def empty_credential(cls, value: Any) -> Any:
        return _empty_credential_to_none(value)

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary using the camelCase wire names."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class IdentityRecord(_IdentityFields):
    """Domain form of an identity, as stored by a persistence layer."""

    private_key_hex: Optional[str] = Field(default=None, alias="privateKeyHex")


class PublicIdentity(_IdentityFields):
    """Domain record minus the private key."""


class IdentityPresent(BaseModel):
    """The narrow shape shown to peers: DID, public key, and credential."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    did: str
    public_key_hex: str = Field(alias="publicKeyHex")
    credential: Optional[VerifiableCredential] = None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ------------------------------------------------------------------
# Introspection
# ------------------------------------------------------------------


@dataclass(frozen=True)
class IdentityDescription:
    """Structured self-description of an identity.

    Parameters
    ----------
    unit:
        ``"<id>@<version>"`` of the identity unit.
    alias, did, provider, created_at:
        Current identifying state.
    native_capabilities:
        Operations the identity implements itself.
    learned_capabilities:
        Namespaced capabilities currently in the registry.
    components:
        Component name to that component's ``whoami()``; ``None`` when the
        component is absent (no signer for a verify-only identity).
    can_sign:
        Whether ``sign`` has any route (learned or bound).
    """

    unit: str
    alias: str
    did: str
    provider: str
    created_at: datetime
    native_capabilities: tuple[str, ...]
    learned_capabilities: tuple[str, ...]
    components: dict[str, Optional[str]] = field(default_factory=dict)
    can_sign: bool = False

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "unit": self.unit,
            "alias": self.alias,
            "did": self.did,
            "provider": self.provider,
            "created_at": self.created_at.isoformat(),
            "native_capabilities": list(self.native_capabilities),
            "learned_capabilities": list(self.learned_capabilities),
            "components": dict(self.components),
            "can_sign": self.can_sign,
        }


__all__ = [
    "DEFAULT_KEY_TYPE",
    "DEFAULT_PROVIDER",
    "IdentityConfig",
    "IdentityDescription",
    "IdentityPresent",
    "IdentityRecord",
    "PublicIdentity",
    "REQUIRED_FIELDS",
]
