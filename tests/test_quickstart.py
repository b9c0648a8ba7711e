"""Test that the quickstart API works for sovereign-identity."""
from __future__ import annotations

from asyncio import run


def test_quickstart_import() -> None:
    import sovereign_identity
    from sovereign_identity import Identity

    assert sovereign_identity.__version__ == "1.0.1"
    assert Identity is not None


def test_quickstart_generate_has_did() -> None:
    from sovereign_identity import Identity

    identity = run(Identity.generate("test-agent")).value
    assert identity.did.startswith("did:key:")
    assert identity.alias == "test-agent"


def test_quickstart_sign_verify() -> None:
    from sovereign_identity import Identity

    identity = run(Identity.generate("signer-agent")).value
    signature = run(identity.sign("hello")).value
    assert run(identity.verify("hello", signature)).value is True


def test_quickstart_store_and_restore() -> None:
    from sovereign_identity import Identity

    identity = run(Identity.generate("doc-agent")).value
    restored = Identity.create(identity.to_json()).value
    assert restored.did == identity.did
    assert restored.public_key_hex == identity.public_key_hex


def test_quickstart_repr() -> None:
    from sovereign_identity import Identity

    identity = run(Identity.generate("repr-agent")).value
    text = repr(identity)
    assert "Identity" in text
    assert "repr-agent" in text


def test_quickstart_multiple_identities() -> None:
    from sovereign_identity import Identity

    id1 = run(Identity.generate("agent-a")).value
    id2 = run(Identity.generate("agent-b")).value
    assert id1.did != id2.did
