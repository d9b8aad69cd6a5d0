"""
Curve25519 compound key pair.

A Curve25519 identity carries two keys on the same curve family:

- X25519 for key agreement.
- Ed25519 for signatures.

Both are concatenated into a single 64-byte public key and a single 64-byte
private key::

    public  = x25519_public (32) || ed25519_public (32)
    private = x25519_private (32) || ed25519_seed (32)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from node_identity.identity.suite import C25519_PRIVATE_KEY_SIZE as PRIVATE_KEY_SIZE
from node_identity.identity.suite import C25519_PUBLIC_KEY_SIZE as PUBLIC_KEY_SIZE

SIGNATURE_SIZE: Final[int] = 64
"""Ed25519 signature size."""

_HALF: Final[int] = 32


@dataclass(frozen=True, slots=True)
class C25519KeyPair:
    """
    Curve25519 key agreement and signing keys.

    Attributes:
        public_key: 64-byte combined public key.
        private_key: 64-byte combined private key, or None for a public-only pair.
    """

    public_key: bytes
    private_key: bytes | None = None

    def __post_init__(self) -> None:
        if len(self.public_key) != PUBLIC_KEY_SIZE:
            raise ValueError(
                f"C25519 public key must be {PUBLIC_KEY_SIZE} bytes, got {len(self.public_key)}"
            )
        if self.private_key is not None and len(self.private_key) != PRIVATE_KEY_SIZE:
            raise ValueError(
                f"C25519 private key must be {PRIVATE_KEY_SIZE} bytes, got {len(self.private_key)}"
            )

    @classmethod
    def generate(cls) -> C25519KeyPair:
        """Generate fresh X25519 and Ed25519 keys."""
        agreement = X25519PrivateKey.generate()
        signing = Ed25519PrivateKey.generate()
        private_key = agreement.private_bytes_raw() + signing.private_bytes_raw()
        return cls.from_private(private_key)

    @classmethod
    def from_private(cls, private_key: bytes) -> C25519KeyPair:
        """
        Load a key pair from its 64-byte private key.

        Raises:
            ValueError: If the private key has the wrong size.
        """
        if len(private_key) != PRIVATE_KEY_SIZE:
            raise ValueError(
                f"C25519 private key must be {PRIVATE_KEY_SIZE} bytes, got {len(private_key)}"
            )
        agreement = X25519PrivateKey.from_private_bytes(private_key[:_HALF])
        signing = Ed25519PrivateKey.from_private_bytes(private_key[_HALF:])
        public_key = (
            agreement.public_key().public_bytes_raw() + signing.public_key().public_bytes_raw()
        )
        return cls(public_key=public_key, private_key=private_key)

    @property
    def has_private(self) -> bool:
        """Whether this pair can sign."""
        return self.private_key is not None

    def check(self) -> bool:
        """Check that the public key is sound and matches the private key, if any."""
        try:
            Ed25519PublicKey.from_public_bytes(self.public_key[_HALF:])
            if self.private_key is None:
                return True
            return C25519KeyPair.from_private(self.private_key).public_key == self.public_key
        except ValueError:
            return False

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message with Ed25519.

        Raises:
            ValueError: If this pair has no private key.
        """
        if self.private_key is None:
            raise ValueError("C25519 key pair has no private key")
        signing = Ed25519PrivateKey.from_private_bytes(self.private_key[_HALF:])
        return signing.sign(message)

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify an Ed25519 signature."""
        if len(signature) != SIGNATURE_SIZE:
            return False
        try:
            Ed25519PublicKey.from_public_bytes(self.public_key[_HALF:]).verify(signature, message)
            return True
        except (InvalidSignature, ValueError):
            return False
