"""
Cryptographic engines for node identities.

`CryptoEngine` is the capability set an `Identity` consumes. `DefaultEngine`
is the reference implementation:

- Curve25519 suite: X25519 + Ed25519, address bound by a memory-hard digest.
- P-384 suite: Curve25519 companion + ECDSA P-384, address bound by a nonce search.
"""

from .engine import DefaultEngine, KeyHandle, default_engine
from .interface import CryptoEngine, EngineHandle, GeneratedKeys
from .root import RootSpecification, decode_root_specification

__all__ = [
    "CryptoEngine",
    "DefaultEngine",
    "EngineHandle",
    "GeneratedKeys",
    "KeyHandle",
    "RootSpecification",
    "decode_root_specification",
    "default_engine",
]
