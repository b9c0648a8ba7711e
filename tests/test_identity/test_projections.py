"""Tests for identity projections, introspection, and the teaching contract."""
from __future__ import annotations

import json
from asyncio import run

import pytest
from pydantic import ValidationError

from sovereign_identity.identity import (
    Identity,
    IdentityDescription,
    IdentityPresent,
    IdentityRecord,
    PublicIdentity,
)


def _generate(alias: str = "alice") -> Identity:
    return run(Identity.generate(alias)).value


class TestToDomain:
    def test_contains_every_field(self) -> None:
        identity = _generate()
        record = identity.to_domain()
        assert isinstance(record, IdentityRecord)
        assert record.alias == identity.alias
        assert record.did == identity.did
        assert record.kid == identity.kid
        assert record.public_key_hex == identity.public_key_hex
        assert record.private_key_hex == identity.private_key_hex
        assert record.provider == "did:key"
        assert record.credential == identity.credential

    def test_is_a_copy(self) -> None:
        identity = _generate()
        record = identity.to_domain()
        record.metadata["tampered"] = True
        assert identity.metadata == {}

    def test_is_frozen(self) -> None:
        record = _generate().to_domain()
        with pytest.raises(ValidationError):
            record.alias = "mallory"  # type: ignore[misc]


class TestToJson:
    def test_camel_case_keys(self) -> None:
        data = _generate().to_json()
        assert {"alias", "did", "kid", "publicKeyHex", "privateKeyHex", "provider", "createdAt"} <= set(data)
        assert data["credential"]["credentialSubject"]["holder"]["id"] == data["did"]

    def test_is_json_serializable(self) -> None:
        text = json.dumps(_generate().to_json())
        assert "publicKeyHex" in text


class TestPublic:
    def test_excludes_private_key(self) -> None:
        identity = _generate()
        public = identity.public()
        assert isinstance(public, PublicIdentity)
        assert not hasattr(public, "private_key_hex")
        assert "privateKeyHex" not in public.to_json()
        assert identity.private_key_hex not in json.dumps(public.to_json())

    def test_keeps_other_fields(self) -> None:
        identity = _generate()
        public = identity.public()
        assert public.did == identity.did
        assert public.public_key_hex == identity.public_key_hex
        assert public.created_at == identity.created_at

    def test_rejects_private_key_field(self) -> None:
        record = _generate().to_domain()
        with pytest.raises(ValidationError):
            PublicIdentity.model_validate(record.model_dump())


class TestPresent:
    def test_only_did_public_key_and_credential(self) -> None:
        identity = _generate()
        present = identity.present()
        assert isinstance(present, IdentityPresent)
        assert set(present.to_json()) == {"did", "publicKeyHex", "credential"}
        assert identity.private_key_hex not in json.dumps(present.to_json())

    def test_present_without_credential(self) -> None:
        data = _generate().to_json()
        data.pop("credential")
        identity = Identity.create(data).value
        assert set(identity.present().to_json()) == {"did", "publicKeyHex"}


class TestIntrospection:
    def test_describe(self) -> None:
        identity = _generate("alice")
        description = identity.describe()
        assert isinstance(description, IdentityDescription)
        assert description.unit == "identity@1.0.1"
        assert description.did == identity.did
        assert "sign" in description.native_capabilities
        assert "signer.sign" in description.learned_capabilities
        assert description.can_sign is True
        assert description.components["signer"] is not None

    def test_describe_verify_only(self) -> None:
        verifier = Identity.from_public(_generate().public()).value
        description = verifier.describe()
        assert description.can_sign is False
        assert description.components["signer"] is None
        assert description.to_dict()["learned_capabilities"] == []

    def test_whoami_and_repr_hide_private_key(self) -> None:
        identity = _generate("alice")
        assert "alice" in identity.whoami()
        assert identity.private_key_hex is not None
        assert identity.private_key_hex not in repr(identity)

    def test_metadata_is_a_copy(self) -> None:
        identity = _generate()
        identity.metadata["x"] = 1
        assert identity.metadata == {}


class TestTeach:
    def test_contract(self) -> None:
        contract = _generate().teach()
        assert contract.unit_id == "identity"
        assert {"issue_credential", "sign", "verify", "get_did", "get_public_key"} <= set(
            contract.capabilities
        )

    def test_another_identity_signs_through_taught_identity(self) -> None:
        alice = _generate("alice")
        verifier = Identity.from_public(alice.public()).value
        verifier.learn([alice.teach()])
        assert verifier.can("identity.sign")
        signed = run(verifier.execute("identity.sign", "hello"))
        assert run(verifier.verify("hello", signed.value)).value is True
