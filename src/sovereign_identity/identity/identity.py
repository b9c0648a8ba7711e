"""Identity — a self-sovereign identity composed of DID, signer, key, and credential units.

Lifecycle
---------
:meth:`Identity.generate`
    Fresh key pair -> PEM -> signer -> key handle -> ``did:key`` ->
    credential unit taught by the key -> self-signed ``IdentityCredential``
    -> record. The identity then learns the signer, key and credential
    contracts.
:meth:`Identity.create`
    Rebuilds the same components from a stored record. Nothing is issued;
    the stored credential is carried over.
:meth:`Identity.from_public`
    Rebuilds a verify-only identity from a public record (no signer).

Every step either completes or the whole call returns a failed
:class:`~sovereign_identity.result.Result`; a partially built identity is
never returned.

Delegation
----------
``sign``, ``verify``, ``issue_credential`` and ``verify_credential`` resolve
in this order:

1. a learned capability (``signer.sign``, ``signer.verify``,
   ``credential.issue_credential``, ``credential.verify_credential``);
2. the bound component;
3. a failed result whose cause is
   :class:`~sovereign_identity.errors.CapabilityMissingError`.

A learned capability that returns a ``Result`` is passed through; any
other return value is wrapped in ``Result.success``.
"""
from __future__ import annotations

import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel

from sovereign_identity.capabilities import CapabilityFn, TeachingContract, Unit, UnitSchema
from sovereign_identity.did.credentials import (
    IDENTITY_CREDENTIAL_TYPE,
    Credential,
    CredentialInput,
    CredentialParty,
    CredentialSubject,
    CredentialVerification,
    SubjectInput,
    VerifiableCredential,
)
from sovereign_identity.did.did_key import DID, is_did_key
from sovereign_identity.errors import (
    CapabilityMissingError,
    ConfigValidationError,
    IdentityError,
)
from sovereign_identity.identity.records import (
    DEFAULT_KEY_TYPE,
    DEFAULT_PROVIDER,
    IdentityConfig,
    IdentityDescription,
    IdentityPresent,
    IdentityRecord,
    PublicIdentity,
)
from sovereign_identity.keys.key_manager import (
    generate_keypair,
    hex_private_key_to_pem,
    hex_to_pem,
)
from sovereign_identity.keys.signer import Key, Signer
from sovereign_identity.result import Result

logger = logging.getLogger(__name__)

IDENTITY_VERSION = "1.0.1"

ConfigInput = Union[IdentityConfig, BaseModel, Mapping[str, Any]]

_NATIVE_CAPABILITIES: tuple[str, ...] = (
    "issue_credential",
    "verify_credential",
    "sign",
    "verify",
    "get_did",
    "get_public_key",
    "public",
    "present",
    "to_json",
    "to_domain",
    "describe",
)


class Identity(Unit):
    """Composite decentralized identity.

    Do not call the constructor directly; use :meth:`generate`,
    :meth:`create`, or :meth:`from_public`.

    Example
    -------
    ::

        result = await Identity.generate("alice")
        identity = result.value
        signature = (await identity.sign("hello")).value
        assert (await identity.verify("hello", signature)).value

        stored = identity.to_json()
        restored = Identity.create(stored).value
        assert restored.did == identity.did
    """

    def __init__(
        self,
        record: IdentityRecord,
        did_unit: DID,
        signer: Optional[Signer],
        key: Key,
        credential_unit: Credential,
    ) -> None:
        super().__init__(UnitSchema(id="identity", version=IDENTITY_VERSION))
        self._record = record
        self._did_unit = did_unit
        self._signer = signer
        self._key = key
        self._credential_unit = credential_unit

    # ------------------------------------------------------------------
    # Bootstrap
    # ------------------------------------------------------------------

    @classmethod
    async def generate(cls, alias: str) -> Result["Identity"]:
        """Generate a new identity with fresh key material.

        Parameters
        ----------
        alias:
            Human-readable name, used as holder and issuer name in the
            self-signed credential. Surrounding whitespace is stripped, as
            :meth:`create` does, so a stored identity reloads unchanged.

        Returns
        -------
        Result[Identity]
            Failure carries the first error encountered as its cause.
        """
        alias = (alias or "").strip()
        if not alias:
            error = ConfigValidationError("Required field: alias", ["alias"])
            return Result.fail(str(error), error)

        try:
            key_pair = generate_keypair("ed25519")
            public_key_pem = hex_to_pem(key_pair.public_key_hex, "ed25519")
            private_key_pem = hex_private_key_to_pem(key_pair.private_key_hex)

            signer = Signer.create(
                private_key_pem,
                public_key_pem,
                key_type="ed25519",
                metadata={"name": f"{alias}-signer"},
            )
            key = signer.create_key()
            public_key_hex = signer.get_public_key_hex()

            did_unit = DID.create(public_key_hex, DEFAULT_KEY_TYPE, metadata={"alias": alias})
            did = did_unit.generate_key()

            credential_unit = Credential.create()
            credential_unit.learn([key.teach()])

            party = CredentialParty(id=did, name=alias)
            issued = await credential_unit.issue_credential(
                CredentialSubject(holder=party, issued_by=party),
                IDENTITY_CREDENTIAL_TYPE,
                did,
            )
            if issued.is_failure:
                message = f"Failed to issue identity credential: {issued.error_message}"
                logger.warning("Identity generation failed for alias %r: %s", alias, message)
                return Result.fail(message, issued.error_cause)

            record = IdentityRecord(
                alias=alias,
                did=did,
                kid=public_key_hex,
                public_key_hex=public_key_hex,
                private_key_hex=key_pair.private_key_hex,
                provider=DEFAULT_PROVIDER,
                credential=issued.value,
                metadata={},
                created_at=datetime.now(timezone.utc),
            )
        except IdentityError as exc:
            logger.warning("Identity generation failed for alias %r: %s", alias, exc)
            return Result.fail(str(exc), exc)
        except Exception as exc:
            logger.exception("Unexpected error generating identity for alias %r", alias)
            return Result.fail(f"Failed to generate identity: {exc}", exc)

        identity = cls(record, did_unit, signer, key, credential_unit)
        identity.learn([signer.teach(), key.teach(), credential_unit.teach()])
        logger.info("Generated identity %s for alias %r", did, alias)
        return Result.success(identity)

    # ------------------------------------------------------------------
    # Reconstruction
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, config: ConfigInput) -> Result["Identity"]:
        """Rebuild an identity from stored data.

        *config* may be an :class:`IdentityConfig`, an
        :class:`IdentityRecord` (``to_domain()``), or a mapping such as the
        output of :meth:`to_json`. ``alias``, ``did``, ``public_key_hex`` and
        ``private_key_hex`` are required.

        For ``did:key`` DIDs the DID is re-derived from the public key and
        must match. DIDs of other methods are accepted as given.
        """
        parsed = IdentityConfig.parse(config)
        if parsed.is_failure:
            return Result.fail(parsed.error_message or "Invalid identity configuration", parsed.error_cause)
        return cls._reconstruct(parsed.value, with_signer=True)

    @classmethod
    def from_public(cls, data: ConfigInput) -> Result["Identity"]:
        """Rebuild a verify-only identity from a public record.

        Only ``alias``, ``did`` and ``public_key_hex`` are required. Any
        private key in *data* is ignored. The result can verify signatures
        and credentials but cannot sign unless taught a ``signer.sign``
        capability.
        """
        parsed = IdentityConfig.parse(data, require_private_key=False)
        if parsed.is_failure:
            return Result.fail(parsed.error_message or "Invalid identity configuration", parsed.error_cause)
        return cls._reconstruct(parsed.value, with_signer=False)

    @classmethod
    def _reconstruct(cls, config: IdentityConfig, with_signer: bool) -> Result["Identity"]:
        try:
            public_key_pem = hex_to_pem(config.public_key_hex, "ed25519")

            signer: Optional[Signer] = None
            if with_signer:
                signer = Signer.create(
                    hex_private_key_to_pem(config.private_key_hex or ""),
                    public_key_pem,
                    key_type="ed25519",
                    metadata={"name": f"{config.alias}-signer"},
                )
                key = signer.create_key()
            else:
                key = Key.create(config.public_key_hex, metadata={"name": f"{config.alias}-key"})

            did_unit = DID.create(config.public_key_hex, DEFAULT_KEY_TYPE, metadata={"alias": config.alias})
            if is_did_key(config.did) and not did_unit.matches(config.did):
                raise ConfigValidationError(
                    f"DID {config.did!r} is not derived from publicKeyHex "
                    f"(expected {did_unit.generate_key()!r})."
                )

            credential_unit = Credential.create()
            credential_unit.learn([key.teach()])

            record = IdentityRecord(
                alias=config.alias,
                did=config.did,
                kid=config.kid or config.public_key_hex,
                public_key_hex=config.public_key_hex,
                private_key_hex=config.private_key_hex if with_signer else None,
                provider=config.provider,
                credential=config.credential,
                metadata=dict(config.metadata),
                created_at=config.created_at,
            )
        except IdentityError as exc:
            logger.warning("Identity reconstruction failed for %r: %s", config.did, exc)
            return Result.fail(str(exc), exc)
        except Exception as exc:
            logger.exception("Unexpected error reconstructing identity %r", config.did)
            return Result.fail(f"Failed to reconstruct identity: {exc}", exc)

        logger.info(
            "Reconstructed %s identity %s",
            "signing" if with_signer else "verify-only",
            config.did,
        )
        return Result.success(cls(record, did_unit, signer, key, credential_unit))

    # ------------------------------------------------------------------
    # Delegated operations
    # ------------------------------------------------------------------

    async def _delegate(
        self,
        capability: str,
        fallback: Optional[CapabilityFn],
        *args: Any,
        hint: str = "",
    ) -> Result[Any]:
        try:
            if self.can(capability):
                logger.debug("%s: routing %s to learned capability", self._record.did, capability)
                outcome = await self.execute(capability, *args)
            elif fallback is not None:
                outcome = fallback(*args)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            else:
                raise CapabilityMissingError(self.dna.id, capability, hint)
        except IdentityError as exc:
            return Result.fail(str(exc), exc)
        except Exception as exc:
            return Result.fail(f"{capability} failed: {exc}", exc)

        if isinstance(outcome, Result):
            return outcome
        return Result.success(outcome)

    async def sign(self, data: str | bytes) -> Result[str]:
        """Sign *data*, returning the hex signature.

        Fails with :class:`CapabilityMissingError` when the identity has no
        private key and no learned ``signer.sign``.
        """
        fallback = self._signer.sign if self._signer is not None else None
        return await self._delegate(
            "signer.sign", fallback, data, hint="Learn from: Signer.create(...).teach()"
        )

    async def verify(self, data: str | bytes, signature: str) -> Result[bool]:
        """Check *signature* over *data* against this identity's public key."""
        fallback = self._signer.verify if self._signer is not None else self._key.verify
        return await self._delegate("signer.verify", fallback, data, signature)

    async def issue_credential(
        self,
        subject: SubjectInput,
        credential_type: str,
        issuer: Optional[str] = None,
    ) -> Result[VerifiableCredential]:
        """Issue a verifiable credential; *issuer* defaults to this identity's DID."""
        return await self._delegate(
            "credential.issue_credential",
            self._credential_unit.issue_credential,
            subject,
            credential_type,
            issuer or self._record.did,
        )

    async def verify_credential(self, credential: CredentialInput) -> Result[CredentialVerification]:
        """Verify a credential's proof and expiry."""
        return await self._delegate(
            "credential.verify_credential",
            self._credential_unit.verify_credential,
            credential,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def alias(self) -> str:
        return self._record.alias

    @property
    def did(self) -> str:
        return self._record.did

    @property
    def kid(self) -> str:
        return self._record.kid

    @property
    def public_key_hex(self) -> str:
        return self._record.public_key_hex

    @property
    def private_key_hex(self) -> Optional[str]:
        return self._record.private_key_hex

    @property
    def provider(self) -> str:
        return self._record.provider

    @property
    def credential(self) -> Optional[VerifiableCredential]:
        return self._record.credential

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._record.metadata)

    @property
    def created_at(self) -> datetime:
        return self._record.created_at

    def get_did(self) -> str:
        return self._record.did

    def get_public_key(self) -> str:
        return self._record.public_key_hex

    # Component access

    def did_unit(self) -> DID:
        return self._did_unit

    def signer_unit(self) -> Optional[Signer]:
        """The bound signer, or ``None`` for a verify-only identity."""
        return self._signer

    def key_unit(self) -> Key:
        return self._key

    def credential_unit(self) -> Credential:
        return self._credential_unit

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def to_domain(self) -> IdentityRecord:
        """Return the full domain record, including the private key hex."""
        return self._record.model_copy(deep=True)

    def to_json(self) -> dict[str, Any]:
        """Return the domain record as a JSON-ready dict with camelCase keys."""
        return self._record.to_json()

    def public(self) -> PublicIdentity:
        """Return the domain record without the private key."""
        return PublicIdentity.model_validate(
            self._record.model_dump(exclude={"private_key_hex"})
        )

    def present(self) -> IdentityPresent:
        """Return the DID, public key, and credential only."""
        credential = self._record.credential
        return IdentityPresent(
            did=self._record.did,
            public_key_hex=self._record.public_key_hex,
            credential=credential.model_copy(deep=True) if credential is not None else None,
        )

    # ------------------------------------------------------------------
    # Unit contract
    # ------------------------------------------------------------------

    def can_sign(self) -> bool:
        return self.can("signer.sign") or self._signer is not None

    def whoami(self) -> str:
        return f"Identity Unit - {self._record.alias} ({self.dna})"

    def describe(self) -> IdentityDescription:
        """Return a structured description of capabilities, components, and state."""
        return IdentityDescription(
            unit=str(self.dna),
            alias=self._record.alias,
            did=self._record.did,
            provider=self._record.provider,
            created_at=self._record.created_at,
            native_capabilities=_NATIVE_CAPABILITIES,
            learned_capabilities=tuple(self.capabilities()),
            components={
                "did": self._did_unit.whoami(),
                "signer": self._signer.whoami() if self._signer is not None else None,
                "key": self._key.whoami(),
                "credential": self._credential_unit.whoami(),
            },
            can_sign=self.can_sign(),
        )

    def teach(self) -> TeachingContract:
        return TeachingContract(
            unit_id=self.dna.id,
            capabilities={
                "issue_credential": self.issue_credential,
                "verify_credential": self.verify_credential,
                "sign": self.sign,
                "verify": self.verify,
                "get_did": self.get_did,
                "get_public_key": self.get_public_key,
            },
        )

    def __repr__(self) -> str:
        return f"Identity(alias={self._record.alias!r}, did={self._record.did!r})"


__all__ = ["IDENTITY_VERSION", "Identity"]
