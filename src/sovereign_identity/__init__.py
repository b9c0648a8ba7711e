"""sovereign-identity — Self-sovereign identities built from composable units.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import sovereign_identity
>>> sovereign_identity.__version__
'1.0.1'

Quick start
-----------
::

    import asyncio
    from sovereign_identity import Identity

    async def main() -> None:
        identity = (await Identity.generate("alice")).value
        signature = (await identity.sign("hello")).value
        assert (await identity.verify("hello", signature)).value

        restored = Identity.create(identity.to_json())
        assert restored.value.did == identity.did

    asyncio.run(main())
"""
from __future__ import annotations

__version__: str = "1.0.1"

from sovereign_identity.result import Result, ResultError

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from sovereign_identity.errors import (
    CapabilityMissingError,
    ComponentConstructionError,
    ConfigValidationError,
    CredentialIssuanceError,
    IdentityError,
    KeyConversionError,
)

# ------------------------------------------------------------------
# Units and capabilities
# ------------------------------------------------------------------
from sovereign_identity.capabilities import (
    CapabilityRegistry,
    TeachingContract,
    Unit,
    UnitSchema,
)
from sovereign_identity.keys import (
    Key,
    KeyPair,
    Signer,
    generate_keypair,
    hex_private_key_to_pem,
    hex_to_pem,
    verify_signature,
)
from sovereign_identity.did import (
    DID,
    Credential,
    CredentialParty,
    CredentialSubject,
    CredentialVerification,
    VerifiableCredential,
    public_key_to_did,
    resolve_public_key_hex,
)

# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------
from sovereign_identity.identity import (
    Identity,
    IdentityConfig,
    IdentityDescription,
    IdentityPresent,
    IdentityRecord,
    PublicIdentity,
)

__all__ = [
    "__version__",
    # Result
    "Result",
    "ResultError",
    # Errors
    "CapabilityMissingError",
    "ComponentConstructionError",
    "ConfigValidationError",
    "CredentialIssuanceError",
    "IdentityError",
    "KeyConversionError",
    # Units
    "CapabilityRegistry",
    "TeachingContract",
    "Unit",
    "UnitSchema",
    # Keys
    "Key",
    "KeyPair",
    "Signer",
    "generate_keypair",
    "hex_private_key_to_pem",
    "hex_to_pem",
    "verify_signature",
    # DID and credentials
    "Credential",
    "CredentialParty",
    "CredentialSubject",
    "CredentialVerification",
    "DID",
    "VerifiableCredential",
    "public_key_to_did",
    "resolve_public_key_hex",
    # Identity
    "Identity",
    "IdentityConfig",
    "IdentityDescription",
    "IdentityPresent",
    "IdentityRecord",
    "PublicIdentity",
]
