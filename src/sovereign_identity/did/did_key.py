"""DID unit — W3C ``did:key`` derivation and resolution for Ed25519 keys.

Implements the ``did:key`` DID method as specified in:
https://w3c-ccg.github.io/did-method-key/

did:key encoding
----------------
1. Take the Ed25519 public key (32 raw bytes).
2. Prepend the Ed25519 multicodec prefix: ``0xed 0x01`` (2 bytes).
3. Encode the 34-byte result with base58btc.
4. Prefix the encoded string with ``z`` (the multibase indicator for base58btc).
5. Assemble: ``did:key:z<base58btc-encoded>``.

Derivation is a pure function of the public key: no registry, no network,
no state. :func:`resolve_public_key_hex` inverts it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sovereign_identity.capabilities import TeachingContract, Unit, UnitSchema
from sovereign_identity.errors import KeyConversionError
from sovereign_identity.keys.key_manager import normalize_key_type

DID_KEY_PREFIX = "did:key:"

# ---------------------------------------------------------------------------
# Multicodec prefix for Ed25519 public keys (varint-encoded 0xed01)
# ---------------------------------------------------------------------------

_ED25519_MULTICODEC_PREFIX: bytes = b"\xed\x01"

# ---------------------------------------------------------------------------
# Base58btc codec
# ---------------------------------------------------------------------------

_BASE58_ALPHABET: bytes = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


def _base58btc_encode(data: bytes) -> str:
    """Encode *data* to a base58btc string."""
    n = int.from_bytes(data, "big")
    result: list[bytes] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_BASE58_ALPHABET[remainder : remainder + 1])
    # Preserve leading zero bytes as '1' characters
    for byte in data:
        if byte == 0:
            result.append(b"1")
        else:
            break
    return b"".join(reversed(result)).decode("ascii")


def _base58btc_decode(encoded: str) -> bytes:
    """Decode a base58btc string back to bytes.

    Raises
    ------
    ValueError
        If the string contains a character not in the base58btc alphabet.
    """
    n = 0
    alphabet_str = _BASE58_ALPHABET.decode("ascii")
    for char in encoded:
        if char not in alphabet_str:
            raise ValueError(
                f"Invalid base58btc character {char!r} in encoded string {encoded!r}"
            )
        n = n * 58 + alphabet_str.index(char)
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_size = 0
    for char in encoded:
        if char == "1":
            pad_size += 1
        else:
            break
    return b"\x00" * pad_size + result


# ---------------------------------------------------------------------------
# Derivation and resolution
# ---------------------------------------------------------------------------


def is_did_key(did: str) -> bool:
    """Return True when *did* uses the ``did:key`` method."""
    return did.startswith(DID_KEY_PREFIX)


def _validate_did_key_format(did: str) -> None:
    """Raise :class:`ValueError` if *did* is not a ``did:key:z<encoded>`` string."""
    if not did.startswith("did:key:z"):
        raise ValueError(
            f"Invalid did:key format: {did!r}. "
            "Expected format: did:key:z<base58btc-encoded-public-key>"
        )
    if not did[len("did:key:z"):]:
        raise ValueError(
            f"Invalid did:key format: {did!r}. The encoded key portion is empty."
        )


def _public_key_bytes(public_key_hex: str) -> bytes:
    try:
        raw = bytes.fromhex(public_key_hex)
    except (TypeError, ValueError) as exc:
        raise KeyConversionError(f"Public key hex is not valid hex: {exc}") from exc
    if len(raw) != 32:
        raise KeyConversionError(
            f"Ed25519 public key must be 32 bytes, got {len(raw)}."
        )
    return raw


def public_key_to_did(public_key_hex: str) -> str:
    """Encode a hex Ed25519 public key as a ``did:key`` DID.

    Raises
    ------
    KeyConversionError
        If *public_key_hex* is not 32 bytes of hex.
    """
    multicodec_bytes = _ED25519_MULTICODEC_PREFIX + _public_key_bytes(public_key_hex)
    return f"did:key:z{_base58btc_encode(multicodec_bytes)}"


def resolve_public_key_hex(did: str) -> str:
    """Decode the hex public key embedded in a ``did:key`` DID.

    Raises
    ------
    ValueError
        If the DID is malformed or its multicodec prefix is not Ed25519.
    """
    _validate_did_key_format(did)
    decoded = _base58btc_decode(did[len("did:key:z"):])
    if not decoded.startswith(_ED25519_MULTICODEC_PREFIX):
        prefix_hex = decoded[:2].hex() if len(decoded) >= 2 else decoded.hex()
        raise ValueError(
            f"Unsupported multicodec prefix 0x{prefix_hex} in DID {did!r}. "
            "Only Ed25519 (0xed01) keys are supported."
        )
    public_bytes = decoded[len(_ED25519_MULTICODEC_PREFIX):]
    if len(public_bytes) != 32:
        raise ValueError(f"DID {did!r} does not encode a 32-byte Ed25519 key.")
    return public_bytes.hex()


# ---------------------------------------------------------------------------
# DIDKeyDocument
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DIDKeyDocument:
    """A minimal resolved ``did:key`` document.

    Parameters
    ----------
    did:
        The fully qualified ``did:key:z<encoded>`` string.
    public_key_hex:
        The 32-byte raw Ed25519 public key as hex.
    """

    did: str
    public_key_hex: str

    @property
    def verification_method_id(self) -> str:
        return f"{self.did}#{self.did[len(DID_KEY_PREFIX):]}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a W3C DID Core shaped dictionary."""
        method_id = self.verification_method_id
        return {
            "@context": [
                "https://www.w3.org/ns/did/v1",
                "https://w3id.org/security/suites/ed25519-2020/v1",
            ],
            "id": self.did,
            "verificationMethod": [
                {
                    "id": method_id,
                    "type": "Ed25519VerificationKey2020",
                    "controller": self.did,
                    "publicKeyMultibase": self.did[len(DID_KEY_PREFIX):],
                }
            ],
            "authentication": [method_id],
            "assertionMethod": [method_id],
        }


def resolve(did: str) -> DIDKeyDocument:
    """Resolve a ``did:key`` DID from the DID string alone."""
    return DIDKeyDocument(did=did, public_key_hex=resolve_public_key_hex(did))


# ---------------------------------------------------------------------------
# DID unit
# ---------------------------------------------------------------------------


class DID(Unit):
    """Derives the ``did:key`` identifier for one public key.

    Example
    -------
    ::

        did_unit = DID.create(public_key_hex, key_type="Ed25519")
        did_unit.generate_key()  # 'did:key:z6Mk...'
    """

    def __init__(
        self,
        public_key_hex: str,
        key_type: str = "Ed25519",
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(UnitSchema(id="did", version="1.0.0"))
        self._public_key_hex = public_key_hex
        self._key_type = key_type
        self._metadata: dict[str, Any] = dict(metadata or {})

    @classmethod
    def create(
        cls,
        public_key_hex: str,
        key_type: str = "Ed25519",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "DID":
        """Build a DID unit, validating key type and public key encoding.

        Raises
        ------
        KeyConversionError
            If the key type is unsupported or the public key is malformed.
        """
        normalize_key_type(key_type)
        _public_key_bytes(public_key_hex)
        return cls(public_key_hex.lower(), key_type, metadata)

    @property
    def public_key_hex(self) -> str:
        return self._public_key_hex

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    def generate_key(self) -> str:
        """Return the ``did:key`` string for this unit's public key."""
        return public_key_to_did(self._public_key_hex)

    def document(self) -> dict[str, Any]:
        """Return the resolved DID document as a dictionary."""
        return DIDKeyDocument(did=self.generate_key(), public_key_hex=self._public_key_hex).to_dict()

    def matches(self, did: str) -> bool:
        """Return True when *did* is the DID derived from this unit's key."""
        return did == self.generate_key()

    def whoami(self) -> str:
        alias = self._metadata.get("alias", "unknown")
        return f"DID Unit - did:key for {alias} ({self._key_type}, {self.dna})"

    def teach(self) -> TeachingContract:
        return TeachingContract(
            unit_id=self.dna.id,
            capabilities={
                "generate_key": self.generate_key,
                "document": self.document,
            },
        )


__all__ = [
    "DID",
    "DIDKeyDocument",
    "DID_KEY_PREFIX",
    "_base58btc_decode",
    "_base58btc_encode",
    "_validate_did_key_format",
    "is_did_key",
    "public_key_to_did",
    "resolve",
    "resolve_public_key_hex",
]
