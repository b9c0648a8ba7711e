"""Tests for routing identity operations through learned capabilities and bound units."""
from __future__ import annotations

from asyncio import run
from typing import Any

from sovereign_identity.capabilities import TeachingContract
from sovereign_identity.errors import CapabilityMissingError
from sovereign_identity.identity import Identity
from sovereign_identity.result import Result


def _generate(alias: str = "alice") -> Identity:
    return run(Identity.generate(alias)).value


def _verify_only(alias: str = "alice") -> tuple[Identity, Identity]:
    original = _generate(alias)
    return original, Identity.from_public(original.public()).value


class TestSignVerify:
    def test_sign_then_verify(self) -> None:
        identity = _generate()
        signature = run(identity.sign("hello"))
        assert signature.is_success
        assert run(identity.verify("hello", signature.value)).value is True

    def test_tampered_data_does_not_verify(self) -> None:
        identity = _generate()
        signature = run(identity.sign("hello")).value
        assert run(identity.verify("hellp", signature)).value is False

    def test_signature_from_other_identity_does_not_verify(self) -> None:
        alice = _generate("alice")
        bob = _generate("bob")
        signature = run(bob.sign("hello")).value
        assert run(alice.verify("hello", signature)).value is False

    def test_bytes_and_text_sign_the_same(self) -> None:
        identity = _generate()
        assert run(identity.sign("hello")).value == run(identity.sign(b"hello")).value


class TestLearnedOverrides:
    def test_taught_sign_replaces_signer(self) -> None:
        identity = _generate()
        calls: list[Any] = []

        def fake_sign(data: str) -> str:
            calls.append(data)
            return "override-signature"

        identity.learn([TeachingContract("signer", {"sign": fake_sign})])
        result = run(identity.sign("hello"))
        assert result.value == "override-signature"
        assert calls == ["hello"]

    def test_taught_async_sign_is_awaited(self) -> None:
        _, verifier = _verify_only()

        async def remote_sign(data: str) -> str:
            return f"remote:{data}"

        verifier.learn([TeachingContract("signer", {"sign": remote_sign})])
        assert verifier.can_sign()
        assert run(verifier.sign("x")).value == "remote:x"

    def test_learned_result_passes_through(self) -> None:
        identity = _generate()
        identity.learn(
            [TeachingContract("signer", {"sign": lambda data: Result.fail("hsm offline")})]
        )
        result = run(identity.sign("hello"))
        assert result.is_failure
        assert result.error_message == "hsm offline"

    def test_learned_exception_becomes_failure(self) -> None:
        identity = _generate()

        def exploding(data: str) -> str:
            raise RuntimeError("device unplugged")

        identity.learn([TeachingContract("signer", {"sign": exploding})])
        result = run(identity.sign("hello"))
        assert result.is_failure
        assert isinstance(result.error_cause, RuntimeError)
        assert "device unplugged" in (result.error_message or "")

    def test_taught_verify_replaces_signer(self) -> None:
        identity = _generate()
        identity.learn([TeachingContract("signer", {"verify": lambda data, sig: sig == "ok"})])
        assert run(identity.verify("anything", "ok")).value is True
        assert run(identity.verify("anything", "no")).value is False

    def test_taught_issue_credential_replaces_unit(self) -> None:
        identity = Identity.create(_generate().to_domain()).value
        seen: list[tuple[Any, ...]] = []

        async def issue(*args: Any) -> str:
            seen.append(args)
            return "issued-elsewhere"

        identity.learn([TeachingContract("credential", {"issue_credential": issue})])
        result = run(identity.issue_credential({"holder": {"id": "did:x"}}, "T"))
        assert result.value == "issued-elsewhere"
        assert seen == [({"holder": {"id": "did:x"}}, "T", identity.did)]


class TestCapabilityMissing:
    def test_verify_only_sign_fails(self) -> None:
        _, verifier = _verify_only()
        result = run(verifier.sign("hello"))
        assert result.is_failure
        assert isinstance(result.error_cause, CapabilityMissingError)
        assert result.error_cause.capability == "signer.sign"
        assert "Cannot sign" in (result.error_message or "")

    def test_verify_only_issue_credential_fails(self) -> None:
        _, verifier = _verify_only()
        result = run(verifier.issue_credential({"holder": {"id": verifier.did}}, "T"))
        assert result.is_failure
        assert isinstance(result.error_cause, CapabilityMissingError)

    def test_verify_only_still_verifies_credentials(self) -> None:
        original, verifier = _verify_only()
        assert original.credential is not None
        outcome = run(verifier.verify_credential(original.credential)).value
        assert outcome.verified is True


class TestCredentials:
    def test_issue_defaults_issuer_to_own_did(self) -> None:
        identity = _generate()
        credential = run(
            identity.issue_credential({"holder": {"id": "did:key:z6MkHolder", "name": "bob"}}, "Membership")
        ).value
        assert credential.issuer == identity.did
        assert credential.type == ["VerifiableCredential", "Membership"]

    def test_issue_for_another_holder_verifies_elsewhere(self) -> None:
        issuer = _generate("issuer")
        holder = _generate("holder")
        credential = run(
            issuer.issue_credential({"holder": {"id": holder.did, "name": "holder"}}, "Membership")
        ).value
        outcome = run(holder.verify_credential(credential.to_dict())).value
        assert outcome.verified is True
        assert outcome.subject == holder.did

    def test_malformed_credential_fails(self) -> None:
        identity = _generate()
        result = run(identity.verify_credential({"not": "a credential"}))
        assert result.is_failure
