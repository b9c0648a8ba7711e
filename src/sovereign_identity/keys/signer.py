"""Signer and Key units.

:class:`Signer` owns a private/public key pair and signs. :class:`Key` is
the public half: it verifies with its own public key and signs only through
a ``signer.sign`` capability learned from a signer (see
:meth:`Signer.create_key`). Signatures are lowercase hex strings over the
UTF-8 bytes of the signed text.
"""
from __future__ import annotations

from typing import Any, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from sovereign_identity.capabilities import TeachingContract, Unit, UnitSchema
from sovereign_identity.errors import (
    CapabilityMissingError,
    ComponentConstructionError,
    KeyConversionError,
)
from sovereign_identity.keys.key_manager import (
    Ed25519KeyManager,
    hex_to_pem,
    load_private_key_pem,
    load_public_key_pem,
    normalize_key_type,
    to_bytes,
    verify_signature,
)


class Signer(Unit):
    """Signs data with an Ed25519 private key.

    Build with :meth:`create`; the constructor expects already-parsed keys.

    Example
    -------
    ::

        signer = Signer.create(private_key_pem, public_key_pem)
        signature = await signer.sign("hello")
        assert await signer.verify("hello", signature)
    """

    def __init__(
        self,
        private_key: Ed25519PrivateKey,
        public_key_hex: str,
        key_type: str = "ed25519",
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(UnitSchema(id="signer", version="1.0.0"))
        self._private_seed = private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        self._key_manager = Ed25519KeyManager()
        self._public_key_hex = public_key_hex
        self._key_type = key_type
        self._metadata: dict[str, Any] = dict(metadata or {})

    @classmethod
    def create(
        cls,
        private_key_pem: str,
        public_key_pem: str,
        key_type: str = "ed25519",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "Signer":
        """Build a signer from a PEM key pair.

        Raises
        ------
        KeyConversionError
            If either PEM cannot be parsed or the key type is unsupported.
        ComponentConstructionError
            If the private key does not belong to the public key.
        """
        normalized = normalize_key_type(key_type)
        private_key = load_private_key_pem(private_key_pem)
        public_key = load_public_key_pem(public_key_pem)

        derived = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        declared = public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)
        if derived != declared:
            raise ComponentConstructionError(
                "Private key does not match public key; refusing to build signer."
            )
        return cls(private_key, declared.hex(), normalized, metadata)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def key_type(self) -> str:
        return self._key_type

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    def get_public_key_hex(self) -> str:
        return self._public_key_hex

    def get_public_key_pem(self) -> str:
        return hex_to_pem(self._public_key_hex, self._key_type)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def sign(self, data: str | bytes) -> str:
        """Sign *data* and return the hex-encoded signature."""
        return self._key_manager.sign(self._private_seed, to_bytes(data)).hex()

    async def verify(self, data: str | bytes, signature: str) -> bool:
        """Return True when *signature* is a valid signature of *data* by this key."""
        return verify_signature(self._public_key_hex, data, signature)

    def create_key(self) -> "Key":
        """Return a :class:`Key` for this signer's public key that can sign through it."""
        key = Key.create(
            self._public_key_hex,
            key_type=self._key_type,
            metadata={"signer": self._metadata.get("name", "signer")},
        )
        key.learn([self.teach()])
        return key

    # ------------------------------------------------------------------
    # Unit contract
    # ------------------------------------------------------------------

    def whoami(self) -> str:
        name = self._metadata.get("name", "anonymous")
        return f"Signer Unit - {name} ({self._key_type}, {self.dna})"

    def teach(self) -> TeachingContract:
        return TeachingContract(
            unit_id=self.dna.id,
            capabilities={
                "sign": self.sign,
                "verify": self.verify,
                "get_public_key": self.get_public_key_hex,
            },
        )


class Key(Unit):
    """Public key handle.

    A key created from raw public key hex can only verify. A key returned by
    :meth:`Signer.create_key` has learned ``signer.sign`` and can sign too.
    """

    def __init__(
        self,
        public_key_hex: str,
        key_type: str = "ed25519",
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(UnitSchema(id="key", version="1.0.0"))
        self._public_key_hex = public_key_hex
        self._key_type = key_type
        self._metadata: dict[str, Any] = dict(metadata or {})

    @classmethod
    def create(
        cls,
        public_key_hex: str,
        key_type: str = "ed25519",
        metadata: Optional[dict[str, Any]] = None,
    ) -> "Key":
        """Build a public-only key, validating the hex encoding.

        Raises
        ------
        KeyConversionError
            If *public_key_hex* is not a valid Ed25519 public key.
        """
        normalized = normalize_key_type(key_type)
        hex_to_pem(public_key_hex, normalized)
        return cls(public_key_hex.lower(), normalized, metadata)

    @property
    def key_type(self) -> str:
        return self._key_type

    def get_public_key(self) -> str:
        return self._public_key_hex

    def can_sign(self) -> bool:
        return self.can("signer.sign")

    async def sign(self, data: str | bytes) -> str:
        """Sign through the learned ``signer.sign`` capability.

        Raises
        ------
        CapabilityMissingError
            If no signer has taught this key.
        """
        if not self.can_sign():
            raise CapabilityMissingError(
                self.dna.id, "signer.sign", "Learn from: Signer.create(...).teach()"
            )
        return await self.execute("signer.sign", data)

    async def verify(self, data: str | bytes, signature: str) -> bool:
        """Verify *signature* over *data* with this key's public key."""
        try:
            return verify_signature(self._public_key_hex, data, signature)
        except KeyConversionError:
            return False

    def whoami(self) -> str:
        mode = "signing" if self.can_sign() else "verify-only"
        return f"Key Unit - {self._public_key_hex[:16]}... ({mode}, {self.dna})"

    def teach(self) -> TeachingContract:
        return TeachingContract(
            unit_id=self.dna.id,
            capabilities={
                "sign": self.sign,
                "verify": self.verify,
                "get_public_key": self.get_public_key,
            },
        )


__all__ = ["Key", "Signer"]
