"""Verifiable Credentials issued and verified by identity units.

Implements the W3C Verifiable Credentials Data Model:
https://www.w3.org/TR/vc-data-model/

Proofs
------
Issued credentials carry an ``Ed25519Signature2020``-style detached proof.
The signed payload is the credential without its ``proof`` member,
serialized as canonical JSON (sorted keys, compact separators). The
:class:`Credential` unit never holds key material: it signs through the
``key.sign`` capability it learns from a
:class:`~sovereign_identity.keys.signer.Key`.

Verification resolves the issuer's public key from a ``did:key`` issuer
DID. For other DID methods it falls back to a learned ``key.verify``.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sovereign_identity.capabilities import TeachingContract, Unit, UnitSchema
from sovereign_identity.did.did_key import DID_KEY_PREFIX, is_did_key, resolve_public_key_hex
from sovereign_identity.errors import (
    CapabilityMissingError,
    CredentialIssuanceError,
    KeyConversionError,
)
from sovereign_identity.keys.key_manager import verify_signature
from sovereign_identity.result import Result

IDENTITY_CREDENTIAL_TYPE = "IdentityCredential"
PROOF_TYPE = "Ed25519Signature2020"

_BASE_CONTEXT = "https://www.w3.org/2018/credentials/v1"
_BASE_TYPE = "VerifiableCredential"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


# ------------------------------------------------------------------
# Subject
# ------------------------------------------------------------------


class CredentialParty(BaseModel):
    """A named DID participating in a credential (holder or issuer)."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None

    @field_validator("id")
    @classmethod
    def validate_id_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("id must not be empty.")
        return value


class CredentialSubject(BaseModel):
    """The entity described by a verifiable credential.

    Extra keys are kept as additional claims.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    holder: CredentialParty
    issued_by: Optional[CredentialParty] = Field(default=None, alias="issuedBy")

    @property
    def id(self) -> str:
        return self.holder.id

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a W3C-compatible plain dictionary."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ------------------------------------------------------------------
# Proof
# ------------------------------------------------------------------


class CredentialProof(BaseModel):
    """Detached Ed25519 proof over the canonical credential payload."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = PROOF_TYPE
    created: datetime
    verification_method: str = Field(alias="verificationMethod")
    proof_purpose: str = Field(default="assertionMethod", alias="proofPurpose")
    proof_value: str = Field(alias="proofValue")


# ------------------------------------------------------------------
# VerifiableCredential (Pydantic v2)
# ------------------------------------------------------------------


class VerifiableCredential(BaseModel):
    """A W3C Verifiable Credential.

    Field names are snake_case in Python and camelCase on the wire
    (``issuanceDate``, ``credentialSubject``, ``@context``).
    """

    model_config = ConfigDict(populate_by_name=True)

    context: list[str] = Field(default_factory=lambda: [_BASE_CONTEXT], alias="@context")
    id: str = Field(default_factory=lambda: f"urn:uuid:{uuid.uuid4()}")
    type: list[str] = Field(default_factory=lambda: [_BASE_TYPE])
    issuer: str
    issuance_date: datetime = Field(alias="issuanceDate")
    expiration_date: Optional[datetime] = Field(default=None, alias="expirationDate")
    credential_subject: CredentialSubject = Field(alias="credentialSubject")
    proof: Optional[CredentialProof] = None

    @field_validator("issuer")
    @classmethod
    def validate_issuer_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("issuer must not be empty.")
        return value

    @field_validator("type")
    @classmethod
    def validate_type_includes_base(cls, value: list[str]) -> list[str]:
        if _BASE_TYPE not in value:
            raise ValueError(
                "type list must include 'VerifiableCredential' as required by "
                "the W3C Verifiable Credentials Data Model."
            )
        return value

    # ------------------------------------------------------------------
    # Status checks
    # ------------------------------------------------------------------

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Return True if the credential has passed its expiration date."""
        if self.expiration_date is None:
            return False
        expiry = self.expiration_date
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return (now or datetime.now(timezone.utc)) > expiry

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dictionary with W3C member names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "VerifiableCredential":
        """Deserialize a credential from a JSON string.

        Raises
        ------
        ValueError
            If the JSON is malformed or fails validation.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON: {exc}") from exc
        return cls.model_validate(data)

    def signing_payload(self) -> str:
        """Return the canonical JSON that the proof signs."""
        data = self.to_dict()
        data.pop("proof", None)
        return json.dumps(data, sort_keys=True, separators=(",", ":"))


CredentialInput = Union[VerifiableCredential, Mapping[str, Any]]
SubjectInput = Union[CredentialSubject, Mapping[str, Any]]


# ------------------------------------------------------------------
# Verification outcome
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CredentialVerification:
    """The outcome of verifying one credential.

    Parameters
    ----------
    verified:
        True only when the proof is valid and the credential has not expired.
    issuer:
        The credential's issuer DID.
    subject:
        The holder DID of the credential subject.
    issuance_date:
        When the credential was issued.
    expiration_date:
        When the credential expires, if ever.
    reason:
        Why verification failed; ``None`` when verified.
    """

    verified: bool
    issuer: str
    subject: str
    issuance_date: datetime
    expiration_date: Optional[datetime] = None
    reason: Optional[str] = None


def _verification_method(issuer: str) -> str:
    if is_did_key(issuer):
        return f"{issuer}#{issuer[len(DID_KEY_PREFIX):]}"
    return f"{issuer}#keys-1"


# ------------------------------------------------------------------
# Credential unit
# ------------------------------------------------------------------


class Credential(Unit):
    """Issues and verifies verifiable credentials.

    Example
    -------
    ::

        credential_unit = Credential.create()
        credential_unit.learn([signer.create_key().teach()])
        result = await credential_unit.issue_credential(
            {"holder": {"id": did, "name": "alice"}},
            "IdentityCredential",
            did,
        )
    """

    def __init__(self) -> None:
        super().__init__(UnitSchema(id="credential", version="1.0.0"))

    @classmethod
    def create(cls) -> "Credential":
        return cls()

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    async def issue_credential(
        self,
        subject: SubjectInput,
        credential_type: str,
        issuer: str,
        expiration_days: Optional[int] = None,
    ) -> Result[VerifiableCredential]:
        """Issue and sign a credential about *subject*.

        Parameters
        ----------
        subject:
            A :class:`CredentialSubject` or a mapping with at least
            ``holder.id``.
        credential_type:
            Domain type appended after ``"VerifiableCredential"``.
        issuer:
            Issuer DID.
        expiration_days:
            Optional lifetime in days.

        Returns
        -------
        Result[VerifiableCredential]
            Failure when ``key.sign`` has not been learned, the subject is
            invalid, or signing fails.
        """
        if not self.can("key.sign"):
            missing = CapabilityMissingError(
                self.dna.id, "key.sign", "Learn from: Signer.create_key().teach()"
            )
            return Result.fail(str(missing), missing)

        try:
            subject_model = (
                subject
                if isinstance(subject, CredentialSubject)
                else CredentialSubject.model_validate(dict(subject))
            )
            now = _utcnow()
            types = [_BASE_TYPE]
            if credential_type and credential_type != _BASE_TYPE:
                types.append(credential_type)
            credential = VerifiableCredential(
                type=types,
                issuer=issuer,
                issuance_date=now,
                expiration_date=(
                    now + timedelta(days=expiration_days) if expiration_days is not None else None
                ),
                credential_subject=subject_model,
            )
        except (ValidationError, TypeError, ValueError) as exc:
            failure = CredentialIssuanceError(f"Invalid credential data: {exc}")
            failure.__cause__ = exc
            return Result.fail(str(failure), failure)

        try:
            signature = await self.execute("key.sign", credential.signing_payload())
        except CapabilityMissingError as exc:
            # The learned key is verify-only.
            return Result.fail(str(exc), exc)
        except Exception as exc:
            failure = CredentialIssuanceError(f"Failed to sign credential: {exc}")
            failure.__cause__ = exc
            return Result.fail(str(failure), failure)

        proof = CredentialProof(
            created=now,
            verification_method=_verification_method(issuer),
            proof_value=str(signature),
        )
        return Result.success(credential.model_copy(update={"proof": proof}))

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    async def verify_credential(
        self, credential: CredentialInput
    ) -> Result[CredentialVerification]:
        """Check a credential's proof and expiry.

        A credential that parses but fails a check yields a *successful*
        result with ``verified=False`` and a ``reason``. Unparseable input,
        or a non-``did:key`` issuer with no learned ``key.verify``, yields a
        failed result.
        """
        try:
            model = (
                credential
                if isinstance(credential, VerifiableCredential)
                else VerifiableCredential.model_validate(dict(credential))
            )
        except (ValidationError, TypeError, ValueError) as exc:
            return Result.fail(f"Malformed credential: {exc}", exc)

        def outcome(verified: bool, reason: Optional[str] = None) -> Result[CredentialVerification]:
            return Result.success(
                CredentialVerification(
                    verified=verified,
                    issuer=model.issuer,
                    subject=model.credential_subject.id,
                    issuance_date=model.issuance_date,
                    expiration_date=model.expiration_date,
                    reason=reason,
                )
            )

        if model.proof is None:
            return outcome(False, "Credential has no proof.")
        if model.proof.verification_method.split("#", 1)[0] != model.issuer:
            return outcome(False, "Proof verification method does not belong to the issuer.")
        if model.is_expired():
            return outcome(False, "Credential has expired.")

        payload = model.signing_payload()
        if is_did_key(model.issuer):
            try:
                public_key_hex = resolve_public_key_hex(model.issuer)
                valid = verify_signature(public_key_hex, payload, model.proof.proof_value)
            except (ValueError, KeyConversionError) as exc:
                return outcome(False, f"Cannot resolve issuer key: {exc}")
        elif self.can("key.verify"):
            valid = bool(await self.execute("key.verify", payload, model.proof.proof_value))
        else:
            missing = CapabilityMissingError(
                self.dna.id,
                "key.verify",
                f"Issuer {model.issuer!r} is not a did:key and no key was learned.",
            )
            return Result.fail(str(missing), missing)

        if not valid:
            return outcome(False, "Proof signature is invalid.")
        return outcome(True)

    # ------------------------------------------------------------------
    # Unit contract
    # ------------------------------------------------------------------

    def whoami(self) -> str:
        mode = "signing" if self.can("key.sign") else "verify-only"
        return f"Credential Unit - W3C verifiable credentials ({mode}, {self.dna})"

    def teach(self) -> TeachingContract:
        return TeachingContract(
            unit_id=self.dna.id,
            capabilities={
                "issue_credential": self.issue_credential,
                "verify_credential": self.verify_credential,
            },
        )


__all__ = [
    "Credential",
    "CredentialParty",
    "CredentialProof",
    "CredentialSubject",
    "CredentialVerification",
    "IDENTITY_CREDENTIAL_TYPE",
    "PROOF_TYPE",
    "VerifiableCredential",
]
