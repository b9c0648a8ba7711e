"""Key material, signing, and public key handles."""
from __future__ import annotations

from sovereign_identity.keys.key_manager import (
    Ed25519KeyManager,
    KeyPair,
    generate_keypair,
    hex_private_key_to_pem,
    hex_to_pem,
    pem_to_public_key_hex,
    verify_signature,
)
from sovereign_identity.keys.signer import Key, Signer

__all__ = [
    "Ed25519KeyManager",
    "Key",
    "KeyPair",
    "Signer",
    "generate_keypair",
    "hex_private_key_to_pem",
    "hex_to_pem",
    "pem_to_public_key_hex",
    "verify_signature",
]
