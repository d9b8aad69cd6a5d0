"""
Node identity.

An identity is a node's address together with the public key it was derived
from, and optionally the matching private key. Holding the private key is
what lets a node sign as that address.

The public parts behave as a value: they are fixed at construction and
compared structurally. Cryptographic operations are delegated to an engine
(see `node_identity.engine`) through an engine handle that is created the
first time it is needed and released exactly once when the identity is
closed or becomes unreachable.

Text and JSON
-------------

`str(identity)` is the public form and `private_key_string()` the secret
form of the canonical text (see `canonical`). Both return an empty string
when the identity cannot currently be represented in that form, for example
a public-only identity has no secret form. Callers must check for the empty
string before using the result.

JSON carries only the public form, as a single string.
"""

from __future__ import annotations

import json
import logging
import threading
import time
import weakref
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Final

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .address import Address
from .canonical import IdentityFields, format_public, format_secret, parse_identity
from .errors import (
    EmptyAddressList,
    EngineError,
    EngineInitError,
    IdentityError,
    InternalEngineError,
    InvalidAddress,
    InvalidKey,
    InvalidParameter,
    MalformedIdentity,
    RootSpecificationError,
)
from .inet import InetAddress, make_sockaddr_storage
from .suite import SuiteType

if TYPE_CHECKING:
    from node_identity.engine.interface import CryptoEngine, EngineHandle

logger = logging.getLogger(__name__)

SIGNATURE_BUFFER_SIZE: Final[int] = 96
"""Largest signature any suite produces."""

ROOT_SPECIFICATION_BUFFER_SIZE: Final[int] = 8192
"""Largest root specification accepted from the engine."""


def time_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def _resolve_engine(engine: CryptoEngine | None) -> CryptoEngine:
    if engine is not None:
        return engine
    from node_identity.engine.engine import default_engine

    return default_engine()


class Identity:
    """
    A node address bound to its public key, with an optional private key.

    Instances are created with `generate`, `from_string`, `from_json` or
    `from_handle`. Equality compares address, suite and both keys; an
    identity with a private key never equals its public-only counterpart.

    The engine handle is private to each instance. Use `close()` or a
    ``with`` block to release it deterministically.
    """

    __slots__ = (
        "_address",
        "_suite",
        "_public_key",
        "_private_key",
        "_engine",
        "_handle",
        "_finalizer",
        "_lock",
        "__weakref__",
    )

    def __init__(
        self,
        address: Address,
        suite: SuiteType,
        public_key: bytes,
        private_key: bytes | None = None,
        *,
        engine: CryptoEngine | None = None,
    ) -> None:
        """
        Build an identity from already decoded parts.

        No lengths are checked here; use `from_string` for untrusted input.
        """
        self._address = Address(address)
        self._suite = SuiteType(suite)
        self._public_key = bytes(public_key)
        self._private_key = bytes(private_key) if private_key else None
        self._engine = engine
        self._handle: EngineHandle | None = None
        self._finalizer: weakref.finalize | None = None
        self._lock = threading.Lock()

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def _from_fields(cls, fields: IdentityFields, engine: CryptoEngine | None) -> Self:
        return cls(
            fields.address,
            fields.suite,
            fields.public_key,
            fields.private_key,
            engine=engine,
        )

    @classmethod
    def from_string(cls, text: str, *, engine: CryptoEngine | None = None) -> Self:
        """
        Parse an identity from its canonical text.

        The private key is imported as well if it is present.

        Raises:
            MalformedIdentity: Fewer than three fields.
            InvalidAddressString: The address field is not a usable address.
            UnrecognizedSuite: The suite tag is not ``0`` or ``1``.
            InvalidKey: A P-384 key has the wrong decoded length.
            binascii.Error: A key field does not decode.
        """
        return cls._from_fields(parse_identity(text), engine)

    @classmethod
    def generate(
        cls,
        suite: SuiteType = SuiteType.C25519,
        *,
        engine: CryptoEngine | None = None,
    ) -> Self:
        """
        Generate a new identity, private key included.

        Raises:
            EngineError: If the engine cannot produce an identity of this suite.
        """
        resolved = _resolve_engine(engine)
        try:
            keys = resolved.generate(suite)
        except Exception as e:
            raise EngineError(f"Engine failed to generate identity: {e}") from e
        if keys is None:
            raise EngineError(f"Engine cannot generate identities of suite {suite!r}")

        logger.debug("Generated identity %s (suite %s)", keys.address, keys.suite.name)
        return cls(
            keys.address,
            keys.suite,
            keys.public_key,
            keys.private_key,
            engine=engine,
        )

    @classmethod
    def from_handle(
        cls,
        handle: EngineHandle | None,
        *,
        engine: CryptoEngine | None = None,
    ) -> Self:
        """
        Adopt an existing engine handle.

        The new identity takes ownership of the handle and releases it at the
        end of its life, including when construction fails.

        Raises:
            InvalidParameter: If `handle` is None.
            InternalEngineError: If the engine cannot render the handle as text.
        """
        if handle is None:
            raise InvalidParameter("Engine handle must not be None")

        resolved = _resolve_engine(engine)
        try:
            text = resolved.text_from_handle(handle, True)
            if not text:
                raise InternalEngineError("Engine returned no text for handle")
            identity = cls.from_string(text, engine=engine)
        except Exception:
            resolved.release(handle)
            raise

        with identity._lock:
            identity._attach(resolved, handle)
        return identity

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def address(self) -> Address:
        """This identity's address."""
        return self._address

    @property
    def suite(self) -> SuiteType:
        """Cryptographic suite."""
        return self._suite

    @property
    def public_key(self) -> bytes:
        """Raw public key bytes."""
        return self._public_key

    @property
    def private_key(self) -> bytes | None:
        """Raw private key bytes, or None for a public-only identity."""
        return self._private_key

    @property
    def has_private(self) -> bool:
        """Whether this identity has its own private portion."""
        return bool(self._private_key)

    def public_only(self) -> Identity:
        """Return a copy of this identity without its private key."""
        return Identity(self._address, self._suite, self._public_key, engine=self._engine)

    def _fields(self) -> IdentityFields:
        return IdentityFields(
            address=self._address,
            suite=self._suite,
            public_key=self._public_key,
            private_key=self._private_key,
        )

    # =========================================================================
    # Text and JSON
    # =========================================================================

    def to_string(self) -> str:
        """
        Return the public form (address, suite and public key).

        An empty string is returned if the public key does not have the exact
        size of the suite.
        """
        return format_public(self._fields())

    def __str__(self) -> str:
        return self.to_string()

    def private_key_string(self) -> str:
        """
        Return the full secret form including the private key.

        An empty string is returned if no private key is set or either key
        does not have the exact size of the suite.
        """
        return format_secret(self._fields())

    def __repr__(self) -> str:
        kind = "secret" if self.has_private else "public"
        return f"Identity({self._address!s}, {self._suite.name}, {kind})"

    def to_json(self) -> str:
        """Encode as a JSON string of the public form. The private key is never included."""
        return json.dumps(self.to_string())

    @classmethod
    def from_json(cls, data: str | bytes, *, engine: CryptoEngine | None = None) -> Self:
        """
        Decode an identity from a JSON string.

        Raises:
            json.JSONDecodeError: If `data` is not JSON.
            MalformedIdentity: If the JSON value is not a string.
            IdentityError: Any error `from_string` raises.
        """
        value = json.loads(data)
        if not isinstance(value, str):
            raise MalformedIdentity(f"Identity JSON must be a string, got {type(value).__name__}")
        return cls.from_string(value, engine=engine)

    def load_json(self, data: str | bytes) -> None:
        """
        Replace this identity in place with one decoded from JSON.

        Nothing changes if decoding fails. On success every field is replaced
        at once and any engine handle held for the old value is released.

        The hash changes with the value, so an identity must not be reloaded
        while it is a set member or a dict key.
        """
        replacement = type(self).from_json(data, engine=self._engine)

        with self._lock:
            self._detach()
            self._address = replacement._address
            self._suite = replacement._suite
            self._public_key = replacement._public_key
            self._private_key = replacement._private_key

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        Instances pass through; strings are parsed as canonical identity text.
        Serialization uses the public form.
        """

        def validate(value: str) -> Identity:
            try:
                return cls.from_string(value)
            except IdentityError as e:
                raise ValueError(e.message) from e

        return core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.chain_schema(
                    [
                        core_schema.str_schema(),
                        core_schema.no_info_plain_validator_function(validate),
                    ]
                ),
            ],
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    # =========================================================================
    # Equality
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return (
            self._address == other._address
            and self._suite == other._suite
            and self._public_key == other._public_key
            and self._private_key == other._private_key
        )

    def __hash__(self) -> int:
        return hash((self._address, self._suite, self._public_key, self._private_key))

    # =========================================================================
    # Engine handle
    # =========================================================================

    def _attach(self, engine: CryptoEngine, handle: EngineHandle) -> None:
        # Caller holds self._lock.
        self._handle = handle
        self._finalizer = weakref.finalize(self, engine.release, handle)

    def _detach(self) -> None:
        # Caller holds self._lock.
        if self._finalizer is not None:
            self._finalizer()
        self._finalizer = None
        self._handle = None

    def _ensure_handle(self) -> EngineHandle | None:
        """
        Return the engine handle, creating it on first use.

        The handle is materialized from the secret form when a private key is
        present, else from the public form.
        """
        with self._lock:
            if self._handle is not None:
                return self._handle

            text = self.private_key_string() or self.to_string()
            if not text:
                logger.debug("Identity %s has no canonical form for the engine", self._address)
                return None

            engine = _resolve_engine(self._engine)
            handle = engine.handle_from_text(text)
            if handle is None:
                logger.debug("Engine rejected identity %s", self._address)
                return None

            self._attach(engine, handle)
            logger.debug("Acquired engine handle for %s", self._address)
            return handle

    def close(self) -> None:
        """Release the engine handle. Safe to call more than once."""
        with self._lock:
            self._detach()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Cryptographic operations
    # =========================================================================

    def locally_validate(self) -> bool:
        """
        Perform local self-validation of this identity.

        Checks that the address is derived from the public key under the
        suite's rules and that the private key, if any, matches.
        """
        handle = self._ensure_handle()
        if handle is None:
            return False
        return _resolve_engine(self._engine).validate(handle)

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message with this identity.

        Raises:
            InvalidKey: If the engine handle cannot be created or the identity
                cannot sign (a public-only identity cannot).
        """
        handle = self._ensure_handle()
        if handle is None:
            raise InvalidKey(f"Identity {self._address} has no usable key material")

        signature = _resolve_engine(self._engine).sign(handle, message, SIGNATURE_BUFFER_SIZE)
        if not signature:
            raise InvalidKey(f"Identity {self._address} cannot sign")
        return signature

    def verify(self, message: bytes, signature: bytes) -> bool:
        """
        Verify a signature made by this identity.

        Never raises: an empty signature, missing key material or an engine
        failure all read as an invalid signature.
        """
        if not signature:
            return False
        try:
            handle = self._ensure_handle()
            if handle is None:
                return False
            return bool(_resolve_engine(self._engine).verify(handle, message, signature))
        except Exception:
            logger.warning("Signature verification for %s failed", self._address, exc_info=True)
            return False

    def make_root(self, addresses: Sequence[InetAddress], now: int | None = None) -> bytes:
        """
        Generate a root specification: this identity plus a signed locator.

        Args:
            addresses: Static endpoints of the root. At least one is required.
            now: Locator timestamp in milliseconds. Defaults to the current time.

        Raises:
            EmptyAddressList: If `addresses` is empty.
            EngineInitError: If the engine handle cannot be created.
            InvalidAddress: If any endpoint cannot be converted.
            RootSpecificationError: If the engine produces nothing, most often
                because the identity has no private key.
        """
        if not addresses:
            raise EmptyAddressList()

        handle = self._ensure_handle()
        if handle is None:
            raise EngineInitError(f"Error initializing engine handle for {self._address}")

        native: list[bytes] = []
        for address in addresses:
            storage = make_sockaddr_storage(address)
            if storage is None:
                raise InvalidAddress(f"Invalid address in address list: {address}")
            native.append(storage)

        timestamp = time_ms() if now is None else now
        spec = _resolve_engine(self._engine).make_root_specification(
            handle, timestamp, native, ROOT_SPECIFICATION_BUFFER_SIZE
        )
        if not spec:
            raise RootSpecificationError(
                "Unable to make root specification (does identity contain a secret key?)"
            )
        return bytes(spec)


def identities_equal(a: Identity | None, b: Identity | None) -> bool:
    """
    Deep equality test that accepts None.

    None equals None and nothing else.
    """
    if b is None:
        return a is None
    if a is None:
        return False
    return a == b
