"""
Address derivation.

An address is not chosen; it is computed from the public key. To make
address collisions expensive to manufacture, a public key only yields an
address if a work criterion holds on its digest:

    digest[0] < WORK_THRESHOLD

Roughly one key in fifteen qualifies.

Curve25519
    digest = scrypt(public_key, salt=ADDRESS_SALT, n, r, p), 64 bytes
    address = digest[59:64]

    scrypt makes every attempt memory-hard, so searching for a colliding key
    costs memory as well as time.

P-384
    digest = SHA-384(public_key)
    address = digest[1:6]

    The public key embeds a one-byte nonce. Generation walks the nonce before
    discarding a key, so the comparatively slow P-384 key generation is
    amortized over 256 attempts.

Addresses in the reserved ranges never qualify.
"""

from __future__ import annotations

import hashlib
from typing import Final

from node_identity.config import SCRYPT_N, SCRYPT_P, SCRYPT_R
from node_identity.identity.address import Address
from node_identity.identity.suite import SuiteType

WORK_THRESHOLD: Final[int] = 17
"""Exclusive upper bound on the first digest byte."""

ADDRESS_SALT: Final[bytes] = b"node-identity-address-v1"
"""Domain separation salt for the Curve25519 memory-hard digest."""

_SCRYPT_DIGEST_SIZE: Final[int] = 64


def c25519_digest(public_key: bytes) -> bytes:
    """Memory-hard digest of a Curve25519 public key."""
    return hashlib.scrypt(
        public_key,
        salt=ADDRESS_SALT,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=_SCRYPT_DIGEST_SIZE,
    )


def p384_digest(public_key: bytes) -> bytes:
    """Digest of a P-384 compound public key, nonce included."""
    return hashlib.sha384(public_key).digest()


def derive_address(suite: SuiteType, public_key: bytes) -> Address | None:
    """
    Compute the address bound to a public key.

    Returns:
        The address, or None if the key does not satisfy the work criterion
        or maps to a reserved address.
    """
    if suite == SuiteType.C25519:
        digest = c25519_digest(public_key)
        address_bytes = digest[-Address.LENGTH :]
    elif suite == SuiteType.P384:
        digest = p384_digest(public_key)
        address_bytes = digest[1 : 1 + Address.LENGTH]
    else:
        raise ValueError(f"Unsupported suite: {suite!r}")

    if digest[0] >= WORK_THRESHOLD:
        return None

    address = Address.from_bytes(address_bytes)
    if address.is_reserved():
        return None
    return address
