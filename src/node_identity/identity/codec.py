"""
Key text codecs.

Two encodings are used for key fields of the canonical identity string:

- Lowercase hexadecimal (Curve25519 identities).
- Lowercase standard base-32 without padding (P-384 identities).

The base-32 alphabet is RFC 4648's ``a-z2-7`` in lower case. Padding
characters are never emitted and never accepted.

Decoding errors are raised as `binascii.Error`, a `ValueError` subclass.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Final

BASE32_ALPHABET: Final[str] = "abcdefghijklmnopqrstuvwxyz234567"
"""RFC 4648 base-32 alphabet in lower case."""

_BASE32_TEXT = re.compile(r"[a-z2-7]*")

# Pad length for each possible length of the final 8-character group.
_BASE32_PADDING: Final[dict[int, int]] = {0: 0, 2: 6, 4: 4, 5: 3, 7: 1}


def hex_encode(data: bytes) -> str:
    """Encode bytes as lowercase hex."""
    return data.hex()


def hex_decode(text: str) -> bytes:
    """
    Decode hex text of either case.

    Raises:
        binascii.Error: On odd length or a non-hex character.
    """
    return binascii.unhexlify(text)


def base32_encode(data: bytes) -> str:
    """Encode bytes as lowercase base-32 without padding."""
    return base64.b32encode(data).decode("ascii").rstrip("=").lower()


def base32_decode(text: str) -> bytes:
    """
    Decode lowercase, unpadded base-32 text.

    Raises:
        binascii.Error: On a character outside the lowercase alphabet or a
            final group whose length cannot come from whole bytes.
    """
    if not _BASE32_TEXT.fullmatch(text):
        raise binascii.Error("Invalid base-32 character")

    pad = _BASE32_PADDING.get(len(text) % 8)
    if pad is None:
        raise binascii.Error(f"Invalid base-32 length: {len(text)}")

    return base64.b32decode(text.upper() + "=" * pad)
