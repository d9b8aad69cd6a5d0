"""
Cryptographic engine interface.

Identities never do elliptic-curve math themselves. Everything that needs
key material (generation, self-validation, signing, verification, root
specifications) goes through an engine.

An engine works on opaque handles. A handle is materialized from the
canonical text of an identity and is owned by exactly one `Identity`, which
releases it once at the end of its life.

Any object with these methods can serve as an engine. The reference
implementation is `DefaultEngine`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TypeAlias, runtime_checkable

from node_identity.identity.address import Address
from node_identity.identity.suite import SuiteType
from node_identity.types import StrictBaseModel

EngineHandle: TypeAlias = object
"""Opaque engine-side key object."""


class GeneratedKeys(StrictBaseModel):
    """Key material for a freshly generated identity."""

    address: Address
    """Address derived from the new public key."""

    suite: SuiteType
    """Suite the keys belong to."""

    public_key: bytes
    """Public key, exactly the suite's public size."""

    private_key: bytes
    """Private key, exactly the suite's private size."""


@runtime_checkable
class CryptoEngine(Protocol):
    """
    Capability set consumed by `Identity`.

    All methods are synchronous and expected to complete promptly. Methods
    signal failure with None, False or empty bytes rather than raising,
    except `generate`, which may raise `ValueError`.
    """

    def generate(self, suite: SuiteType) -> GeneratedKeys | None:
        """Create a new identity of the given suite."""
        ...

    def handle_from_text(self, text: str) -> EngineHandle | None:
        """Materialize a handle from canonical identity text."""
        ...

    def text_from_handle(self, handle: EngineHandle, include_private: bool) -> str:
        """Render a handle back to canonical identity text."""
        ...

    def validate(self, handle: EngineHandle) -> bool:
        """Check the self-consistency of the key material behind a handle."""
        ...

    def sign(self, handle: EngineHandle, message: bytes, max_length: int) -> bytes:
        """Sign a message. Empty bytes if the handle cannot sign."""
        ...

    def verify(self, handle: EngineHandle, message: bytes, signature: bytes) -> bool:
        """Verify a signature against the handle's public key."""
        ...

    def make_root_specification(
        self,
        handle: EngineHandle,
        timestamp_ms: int,
        addresses: Sequence[bytes],
        max_length: int,
    ) -> bytes:
        """
        Build a signed root specification.

        Addresses are in native storage form (see `InetAddress.to_sockaddr`).
        Empty bytes if the handle cannot sign or the output exceeds `max_length`.
        """
        ...

    def release(self, handle: EngineHandle) -> None:
        """Drop the key material behind a handle. Idempotent."""
        ...
