"""
Identity cryptographic suites.

Every identity belongs to exactly one suite. The suite fixes the exact key
sizes and the text encoding of the key fields::

    | suite       | tag | public key | private key | key text          |
    |-------------|-----|------------|-------------|-------------------|
    | Curve25519  |  0  |  64 bytes  |  64 bytes   | lowercase hex     |
    | P-384       |  1  | 114 bytes  | 112 bytes   | lowercase base-32 |

No other key lengths are valid for a suite.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Final

from . import codec


class SuiteType(IntEnum):
    """Suite tag as it appears in the second field of an identity string."""

    C25519 = 0
    """X25519 key agreement with Ed25519 signatures."""

    P384 = 1
    """Curve25519 keys plus a NIST P-384 signing key."""


class KeyEncoding(Enum):
    """Text encoding of key fields."""

    HEX = "hex"
    BASE32 = "base32"

    def encode(self, data: bytes) -> str:
        """Encode key bytes for the identity string."""
        return _ENCODERS[self](data)

    def decode(self, text: str) -> bytes:
        """Decode a key field. Decoding errors propagate unchanged."""
        return _DECODERS[self](text)


_ENCODERS: Final[dict[KeyEncoding, Callable[[bytes], str]]] = {
    KeyEncoding.HEX: codec.hex_encode,
    KeyEncoding.BASE32: codec.base32_encode,
}

_DECODERS: Final[dict[KeyEncoding, Callable[[str], bytes]]] = {
    KeyEncoding.HEX: codec.hex_decode,
    KeyEncoding.BASE32: codec.base32_decode,
}


@dataclass(frozen=True, slots=True)
class SuiteParams:
    """
    Size and encoding rules of one suite.

    Attributes:
        name: Human readable suite name used in error messages.
        public_key_size: Exact public key length in bytes.
        private_key_size: Exact private key length in bytes.
        encoding: Text encoding of both key fields.
        strict_parse: Whether key lengths are enforced when parsing text.
    """

    name: str
    public_key_size: int
    private_key_size: int
    encoding: KeyEncoding
    strict_parse: bool


C25519_PUBLIC_KEY_SIZE: Final[int] = 64
C25519_PRIVATE_KEY_SIZE: Final[int] = 64
P384_PUBLIC_KEY_SIZE: Final[int] = 114
P384_PRIVATE_KEY_SIZE: Final[int] = 112

SUITES: Final[dict[SuiteType, SuiteParams]] = {
    # Curve25519 identities predate length checks in the parser.
    SuiteType.C25519: SuiteParams(
        name="C25519",
        public_key_size=C25519_PUBLIC_KEY_SIZE,
        private_key_size=C25519_PRIVATE_KEY_SIZE,
        encoding=KeyEncoding.HEX,
        strict_parse=False,
    ),
    SuiteType.P384: SuiteParams(
        name="P384",
        public_key_size=P384_PUBLIC_KEY_SIZE,
        private_key_size=P384_PRIVATE_KEY_SIZE,
        encoding=KeyEncoding.BASE32,
        strict_parse=True,
    ),
}
"""Suite table. The only place key sizes are defined."""

_SUITE_TAGS: Final[dict[str, SuiteType]] = {str(int(s)): s for s in SuiteType}


def suite_from_tag(tag: str) -> SuiteType | None:
    """Map the text tag of an identity string to its suite, or None."""
    return _SUITE_TAGS.get(tag)
