"""
Reference cryptographic engine.

`DefaultEngine` implements the `CryptoEngine` protocol on top of the
`cryptography` package. Handles are `KeyHandle` objects holding the parsed
identity and its loaded key pair.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from node_identity.identity.canonical import (
    IdentityFields,
    format_public,
    format_secret,
    parse_identity,
)
from node_identity.identity.errors import IdentityError
from node_identity.identity.suite import SuiteType

from . import p384, work
from .c25519 import C25519KeyPair
from .interface import EngineHandle, GeneratedKeys
from .p384 import P384KeyPair
from .root import encode_root_specification

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS: Final[int] = 100_000
"""Upper bound on discarded key pairs before generation gives up."""

KeyPair = C25519KeyPair | P384KeyPair
"""Key pair of either suite."""


@dataclass(slots=True)
class KeyHandle:
    """
    Engine-side state behind an identity.

    Attributes:
        fields: The identity the handle was created from.
        keys: Loaded key pair, or None once released.
    """

    fields: IdentityFields
    keys: KeyPair | None

    @property
    def released(self) -> bool:
        """Whether the key material has been dropped."""
        return self.keys is None


def load_key_pair(fields: IdentityFields) -> KeyPair:
    """
    Load the key pair for parsed identity fields.

    Raises:
        ValueError: If a key has the wrong size or is not a valid key.
    """
    if fields.suite == SuiteType.C25519:
        return C25519KeyPair(public_key=fields.public_key, private_key=fields.private_key)
    return P384KeyPair(public_key=fields.public_key, private_key=fields.private_key)


class DefaultEngine:
    """Reference `CryptoEngine` built on the `cryptography` package."""

    def generate(self, suite: SuiteType) -> GeneratedKeys | None:
        """
        Generate a new identity.

        Fresh keys are drawn until one satisfies the address work criterion.

        Returns:
            The new key material, or None if the suite is not supported.
        """
        try:
            suite = SuiteType(suite)
        except ValueError:
            logger.debug("Refusing to generate identity of unknown suite %r", suite)
            return None

        for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
            found = self._try_generate(suite)
            if found is not None:
                logger.debug(
                    "Generated %s identity %s after %d key pairs",
                    suite.name,
                    found.address,
                    attempt,
                )
                return found

        logger.warning("No %s key pair satisfied the address criterion", suite.name)
        return None

    @staticmethod
    def _try_generate(suite: SuiteType) -> GeneratedKeys | None:
        if suite == SuiteType.C25519:
            keys = C25519KeyPair.generate()
            address = work.derive_address(suite, keys.public_key)
            if address is None:
                return None
            assert keys.private_key is not None
            return GeneratedKeys(
                address=address,
                suite=suite,
                public_key=keys.public_key,
                private_key=keys.private_key,
            )

        # P-384 keys are costly, so search the nonce space before discarding one.
        companion = C25519KeyPair.generate()
        assert companion.private_key is not None
        ecc384_public, ecc384_private = p384.generate_ecc384()
        for nonce in range(256):
            public_key = p384.compose_public_key(nonce, companion.public_key, ecc384_public)
            address = work.derive_address(suite, public_key)
            if address is not None:
                return GeneratedKeys(
                    address=address,
                    suite=suite,
                    public_key=public_key,
                    private_key=companion.private_key + ecc384_private,
                )
        return None

    def handle_from_text(self, text: str) -> EngineHandle | None:
        """Parse identity text and load its keys. None if either step fails."""
        try:
            fields = parse_identity(text)
            keys = load_key_pair(fields)
        except (IdentityError, ValueError) as e:
            logger.debug("Cannot create engine handle: %s", e)
            return None
        return KeyHandle(fields=fields, keys=keys)

    def text_from_handle(self, handle: EngineHandle, include_private: bool) -> str:
        """Render a handle as identity text; empty once released."""
        key_handle = self._live(handle)
        if key_handle is None:
            return ""
        if include_private and key_handle.fields.private_key is not None:
            return format_secret(key_handle.fields)
        return format_public(key_handle.fields)

    def validate(self, handle: EngineHandle) -> bool:
        """
        Check that the address is bound to the public key.

        Also checks that the public key is a sound key and that the private
        key, when present, reproduces it.
        """
        key_handle = self._live(handle)
        if key_handle is None or key_handle.keys is None:
            return False

        fields = key_handle.fields
        address = work.derive_address(fields.suite, fields.public_key)
        if address is None or address != fields.address:
            logger.debug("Address %s is not bound to its public key", fields.address)
            return False
        return key_handle.keys.check()

    def sign(self, handle: EngineHandle, message: bytes, max_length: int) -> bytes:
        """Sign a message; empty bytes for a public-only or released handle."""
        key_handle = self._live(handle)
        if key_handle is None or key_handle.keys is None or not key_handle.keys.has_private:
            return b""
        try:
            signature = key_handle.keys.sign(message)
        except ValueError as e:
            logger.debug("Signing failed: %s", e)
            return b""
        if len(signature) > max_length:
            return b""
        return signature

    def verify(self, handle: EngineHandle, message: bytes, signature: bytes) -> bool:
        """Verify a signature against the handle's public key."""
        key_handle = self._live(handle)
        if key_handle is None or key_handle.keys is None:
            return False
        return key_handle.keys.verify(message, signature)

    def make_root_specification(
        self,
        handle: EngineHandle,
        timestamp_ms: int,
        addresses: Sequence[bytes],
        max_length: int,
    ) -> bytes:
        """Build and sign a root specification; empty bytes if it cannot."""
        key_handle = self._live(handle)
        if key_handle is None or key_handle.keys is None or not key_handle.keys.has_private:
            return b""

        keys = key_handle.keys
        fields = key_handle.fields
        try:
            spec = encode_root_specification(
                address=fields.address,
                suite=fields.suite,
                public_key=fields.public_key,
                timestamp_ms=timestamp_ms,
                endpoints=addresses,
                sign=keys.sign,
            )
        except ValueError as e:
            logger.debug("Cannot build root specification: %s", e)
            return b""

        if len(spec) > max_length:
            logger.debug("Root specification exceeds %d bytes", max_length)
            return b""
        return spec

    def release(self, handle: EngineHandle) -> None:
        """Drop the key material of a handle. Releasing twice is a no-op."""
        if isinstance(handle, KeyHandle) and handle.keys is not None:
            handle.keys = None
            logger.debug("Released engine handle for %s", handle.fields.address)

    @staticmethod
    def _live(handle: EngineHandle) -> KeyHandle | None:
        if not isinstance(handle, KeyHandle) or handle.released:
            return None
        return handle


_default_engine: DefaultEngine | None = None


def default_engine() -> DefaultEngine:
    """Return the process-wide reference engine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = DefaultEngine()
    return _default_engine
