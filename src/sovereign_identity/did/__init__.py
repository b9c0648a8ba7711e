"""sovereign_identity.did — ``did:key`` identifiers and verifiable credentials.

Submodules
----------
did_key
    base58btc codec, ``did:key`` derivation/resolution, and the DID unit.
credentials
    VerifiableCredential models and the Credential unit.

Quick start
-----------
::

    from sovereign_identity.did import DID, Credential
    from sovereign_identity.keys import Signer, generate_keypair, hex_to_pem, hex_private_key_to_pem

    pair = generate_keypair()
    signer = Signer.create(hex_private_key_to_pem(pair.private_key_hex), hex_to_pem(pair.public_key_hex))
    did = DID.create(pair.public_key_hex).generate_key()

    credential_unit = Credential.create()
    credential_unit.learn([signer.create_key().teach()])
    result = await credential_unit.issue_credential({"holder": {"id": did}}, "ExampleCredential", did)
"""
from __future__ import annotations

from sovereign_identity.did.credentials import (
    IDENTITY_CREDENTIAL_TYPE,
    Credential,
    CredentialParty,
    CredentialProof,
    CredentialSubject,
    CredentialVerification,
    VerifiableCredential,
)
from sovereign_identity.did.did_key import (
    DID,
    DID_KEY_PREFIX,
    DIDKeyDocument,
    is_did_key,
    public_key_to_did,
    resolve,
    resolve_public_key_hex,
)

__all__ = [
    # did:key
    "DID",
    "DID_KEY_PREFIX",
    "DIDKeyDocument",
    "is_did_key",
    "public_key_to_did",
    "resolve",
    "resolve_public_key_hex",
    # credentials
    "Credential",
    "CredentialParty",
    "CredentialProof",
    "CredentialSubject",
    "CredentialVerification",
    "IDENTITY_CREDENTIAL_TYPE",
    "VerifiableCredential",
]
