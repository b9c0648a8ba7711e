"""Ed25519KeyManager — Ed25519 key generation, encoding, signing, and verification.

This module is a thin wrapper around the ``cryptography`` package's Ed25519
primitives. Key material crosses module boundaries as lowercase hex
strings (the persisted form of an identity) or PEM text (the form the
:class:`~sovereign_identity.keys.signer.Signer` is built from).

Hex formats
-----------
- public key: 32 raw bytes, 64 hex characters.
- private key: the 32-byte seed (64 hex characters). A 64-byte
  ``seed || public`` value (128 hex characters) is also accepted; only the
  seed is used.
"""
from __future__ import annotations

from dataclasses import dataclass

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
    load_pem_public_key,
)

from sovereign_identity.errors import KeyConversionError

SUPPORTED_KEY_TYPES: frozenset[str] = frozenset({"ed25519"})

_PUBLIC_KEY_BYTES = 32
_SEED_BYTES = 32


def normalize_key_type(key_type: str) -> str:
    """Return the canonical lowercase key type, rejecting unsupported ones.

    Raises
    ------
    KeyConversionError
        If *key_type* is not Ed25519.
    """
    normalized = (key_type or "").strip().lower()
    if normalized not in SUPPORTED_KEY_TYPES:
        raise KeyConversionError(
            f"Unsupported key type {key_type!r}. Supported: {sorted(SUPPORTED_KEY_TYPES)}"
        )
    return normalized


@dataclass(frozen=True)
class KeyPair:
    """A hex-encoded key pair.

    Parameters
    ----------
    public_key_hex:
        64-character hex public key.
    private_key_hex:
        64-character hex private key seed.
    key_type:
        Canonical key type (``"ed25519"``).
    """

    public_key_hex: str
    private_key_hex: str
    key_type: str = "ed25519"

    def __repr__(self) -> str:
        return f"KeyPair(public_key_hex={self.public_key_hex!r}, key_type={self.key_type!r})"


class Ed25519KeyManager:
    """Ed25519 key management: generate, encode, sign, and verify.

    Example
    -------
    ::

        manager = Ed25519KeyManager()
        pair = manager.generate_keypair()
        signature = manager.sign(bytes.fromhex(pair.private_key_hex), b"hello")
        assert manager.verify(bytes.fromhex(pair.public_key_hex), signature, b"hello")
    """

    def generate_keypair(self) -> KeyPair:
        """Generate a new Ed25519 key pair encoded as hex."""
        private_key = Ed25519PrivateKey.generate()
        private_bytes = private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return KeyPair(public_key_hex=public_bytes.hex(), private_key_hex=private_bytes.hex())

    def sign(self, private_key_bytes: bytes, data: bytes) -> bytes:
        """Sign *data* with a raw 32-byte Ed25519 private key seed.

        Returns
        -------
        bytes
            The 64-byte Ed25519 signature.
        """
        private_key = Ed25519PrivateKey.from_private_bytes(private_key_bytes)
        return private_key.sign(data)

    def verify(self, public_key_bytes: bytes, signature: bytes, data: bytes) -> bool:
        """Verify an Ed25519 signature.

        Returns
        -------
        bool
            ``True`` if the signature is valid, ``False`` otherwise.
        """
        public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
        try:
            public_key.verify(signature, data)
            return True
        except InvalidSignature:
            return False


# ---------------------------------------------------------------------------
# Hex <-> PEM conversion
# ---------------------------------------------------------------------------


def _decode_hex(value: str, label: str, allowed_lengths: tuple[int, ...]) -> bytes:
    if not value:
        raise KeyConversionError(f"{label} is empty.")
    try:
        raw = bytes.fromhex(value)
    except ValueError as exc:
        raise KeyConversionError(f"{label} is not valid hex: {exc}") from exc
    if len(raw) not in allowed_lengths:
        expected = " or ".join(str(n) for n in allowed_lengths)
        raise KeyConversionError(
            f"{label} must decode to {expected} bytes, got {len(raw)}."
        )
    return raw


def generate_keypair(key_type: str = "ed25519") -> KeyPair:
    """Generate a fresh hex-encoded key pair of *key_type*."""
    normalize_key_type(key_type)
    return Ed25519KeyManager().generate_keypair()


def hex_to_pem(public_key_hex: str, key_type: str = "ed25519") -> str:
    """Encode a hex public key as a SubjectPublicKeyInfo PEM string.

    Raises
    ------
    KeyConversionError
        If the hex is malformed or the key type is unsupported.
    """
    normalize_key_type(key_type)
    raw = _decode_hex(public_key_hex, "Public key hex", (_PUBLIC_KEY_BYTES,))
    try:
        public_key = Ed25519PublicKey.from_public_bytes(raw)
    except ValueError as exc:
        raise KeyConversionError(f"Invalid Ed25519 public key: {exc}") from exc
    return public_key.public_bytes(Encoding.PEM, PublicFormat.SubjectPublicKeyInfo).decode("ascii")


def hex_private_key_to_pem(private_key_hex: str) -> str:
    """Encode a hex Ed25519 private key as an unencrypted PKCS#8 PEM string.

    Raises
    ------
    KeyConversionError
        If the hex is malformed or has the wrong length.
    """
    raw = _decode_hex(private_key_hex, "Private key hex", (_SEED_BYTES, _SEED_BYTES * 2))
    private_key = Ed25519PrivateKey.from_private_bytes(raw[:_SEED_BYTES])
    return private_key.private_bytes(
        Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
    ).decode("ascii")


def to_bytes(data: str | bytes) -> bytes:
    """Return *data* as bytes, UTF-8 encoding text."""
    return data if isinstance(data, bytes) else data.encode("utf-8")


def verify_signature(public_key_hex: str, data: str | bytes, signature_hex: str) -> bool:
    """Verify a hex Ed25519 signature over *data* against a hex public key.

    A malformed signature yields ``False``; a malformed public key raises
    :class:`KeyConversionError`.
    """
    public_bytes = _decode_hex(public_key_hex, "Public key hex", (_PUBLIC_KEY_BYTES,))
    try:
        signature = bytes.fromhex(signature_hex)
    except (TypeError, ValueError):
        return False
    return Ed25519KeyManager().verify(public_bytes, signature, to_bytes(data))


def load_private_key_pem(private_key_pem: str) -> Ed25519PrivateKey:
    """Parse a PKCS#8 PEM string into an Ed25519 private key."""
    try:
        key = load_pem_private_key(private_key_pem.encode("ascii"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyConversionError(f"Cannot load private key PEM: {exc}") from exc
    if not isinstance(key, Ed25519PrivateKey):
        raise KeyConversionError("Private key PEM does not contain an Ed25519 key.")
    return key


def load_public_key_pem(public_key_pem: str) -> Ed25519PublicKey:
    """Parse a SubjectPublicKeyInfo PEM string into an Ed25519 public key."""
    try:
        key = load_pem_public_key(public_key_pem.encode("ascii"))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyConversionError(f"Cannot load public key PEM: {exc}") from exc
    if not isinstance(key, Ed25519PublicKey):
        raise KeyConversionError("Public key PEM does not contain an Ed25519 key.")
    return key


def pem_to_public_key_hex(public_key_pem: str) -> str:
    """Return the raw hex encoding of a public key PEM."""
    key = load_public_key_pem(public_key_pem)
    return key.public_bytes(Encoding.Raw, PublicFormat.Raw).hex()


__all__ = [
    "Ed25519KeyManager",
    "KeyPair",
    "SUPPORTED_KEY_TYPES",
    "generate_keypair",
    "hex_private_key_to_pem",
    "hex_to_pem",
    "load_private_key_pem",
    "load_public_key_pem",
    "normalize_key_type",
    "pem_to_public_key_hex",
    "to_bytes",
    "verify_signature",
]
