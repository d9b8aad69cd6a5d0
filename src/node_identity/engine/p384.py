"""
NIST P-384 compound key pair.

A P-384 identity keeps a full Curve25519 pair for key agreement and adds a
P-384 key for signatures. The public key also carries a one-byte nonce that
is searched during generation to bind the key to its address (see `work`)::

    public  = nonce (1) || c25519_public (64) || p384_compressed_point (49)
    private = c25519_private (64) || p384_scalar (48)

Signatures are ECDSA over SHA-384(message || public key), encoded as the
raw 96-byte ``r || s`` concatenation. Hashing the public key into the digest
ties a signature to one identity.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)

from node_identity.identity.suite import P384_PRIVATE_KEY_SIZE as PRIVATE_KEY_SIZE
from node_identity.identity.suite import P384_PUBLIC_KEY_SIZE as PUBLIC_KEY_SIZE

from . import c25519
from .c25519 import C25519KeyPair

ECC384_PUBLIC_KEY_SIZE: Final[int] = 49
"""Compressed P-384 point size."""

ECC384_PRIVATE_KEY_SIZE: Final[int] = 48
"""P-384 private scalar size."""

SIGNATURE_SIZE: Final[int] = 96
"""Raw r || s signature size."""

_SCALAR_SIZE: Final[int] = 48
_CURVE = ec.SECP384R1()

_C25519_PUBLIC_END: Final[int] = 1 + c25519.PUBLIC_KEY_SIZE


def compose_public_key(nonce: int, c25519_public: bytes, ecc384_public: bytes) -> bytes:
    """Assemble the 114-byte compound public key."""
    return bytes([nonce]) + c25519_public + ecc384_public


def generate_ecc384() -> tuple[bytes, bytes]:
    """
    Generate a P-384 key.

    Returns:
        Tuple of (compressed public point, private scalar).
    """
    key = ec.generate_private_key(_CURVE)
    return _compressed_point(key.public_key()), _scalar_bytes(key)


def _compressed_point(public_key: ec.EllipticCurvePublicKey) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint,
    )


def _scalar_bytes(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    return private_key.private_numbers().private_value.to_bytes(ECC384_PRIVATE_KEY_SIZE, "big")


@dataclass(frozen=True, slots=True)
class P384KeyPair:
    """
    P-384 signing key plus its Curve25519 companion.

    Attributes:
        public_key: 114-byte compound public key.
        private_key: 112-byte compound private key, or None for a public-only pair.
    """

    public_key: bytes
    private_key: bytes | None = None

    def __post_init__(self) -> None:
        if len(self.public_key) != PUBLIC_KEY_SIZE:
            raise ValueError(
                f"P384 public key must be {PUBLIC_KEY_SIZE} bytes, got {len(self.public_key)}"
            )
        if self.private_key is not None and len(self.private_key) != PRIVATE_KEY_SIZE:
            raise ValueError(
                f"P384 private key must be {PRIVATE_KEY_SIZE} bytes, got {len(self.private_key)}"
            )

    @property
    def nonce(self) -> int:
        """Address binding nonce."""
        return self.public_key[0]

    @property
    def c25519(self) -> C25519KeyPair:
        """The Curve25519 companion pair."""
        private = None if self.private_key is None else self.private_key[: c25519.PRIVATE_KEY_SIZE]
        return C25519KeyPair(
            public_key=self.public_key[1:_C25519_PUBLIC_END],
            private_key=private,
        )

    @property
    def ecc384_public(self) -> bytes:
        """Compressed P-384 point."""
        return self.public_key[_C25519_PUBLIC_END:]

    @property
    def has_private(self) -> bool:
        """Whether this pair can sign."""
        return self.private_key is not None

    def _signing_key(self) -> ec.EllipticCurvePrivateKey:
        if self.private_key is None:
            raise ValueError("P384 key pair has no private key")
        scalar = int.from_bytes(self.private_key[c25519.PRIVATE_KEY_SIZE :], "big")
        return ec.derive_private_key(scalar, _CURVE)

    def _verifying_key(self) -> ec.EllipticCurvePublicKey:
        return ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, self.ecc384_public)

    def _digest(self, message: bytes) -> bytes:
        return hashlib.sha384(message + self.public_key).digest()

    def check(self) -> bool:
        """Check that both halves are sound and match the private key, if any."""
        try:
            self._verifying_key()
            if not self.c25519.check():
                return False
            if self.private_key is None:
                return True
            derived = _compressed_point(self._signing_key().public_key())
            return derived == self.ecc384_public
        except ValueError:
            return False

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message with ECDSA P-384.

        Returns:
            96-byte r || s signature.

        Raises:
            ValueError: If this pair has no private key.
        """
        der_signature = self._signing_key().sign(
            self._digest(message), ec.ECDSA(Prehashed(hashes.SHA384()))
        )
        r, s = decode_dss_signature(der_signature)
        return r.to_bytes(_SCALAR_SIZE, "big") + s.to_bytes(_SCALAR_SIZE, "big")

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a raw r || s signature."""
        if len(signature) != SIGNATURE_SIZE:
            return False
        try:
            r = int.from_bytes(signature[:_SCALAR_SIZE], "big")
            s = int.from_bytes(signature[_SCALAR_SIZE:], "big")
            self._verifying_key().verify(
                encode_dss_signature(r, s),
                self._digest(message),
                ec.ECDSA(Prehashed(hashes.SHA384())),
            )
            return True
        except (InvalidSignature, ValueError):
            return False
