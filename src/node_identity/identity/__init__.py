"""
Node identities.

An identity binds a 40-bit node address to the public key it was derived
from, optionally with the private key that lets the node sign as that
address.

Canonical text::

    <address>:<suite>:<public key>[:<private key>]

Two suites are supported:

- ``0``: Curve25519, keys in lowercase hex.
- ``1``: P-384, keys in lowercase unpadded base-32.
"""

from .address import Address
from .canonical import IdentityFields, format_public, format_secret, parse_identity
from .errors import (
    EmptyAddressList,
    EngineError,
    EngineInitError,
    IdentityError,
    InternalEngineError,
    InvalidAddress,
    InvalidAddressString,
    InvalidKey,
    InvalidParameter,
    MalformedIdentity,
    RootSpecificationError,
    UnrecognizedSuite,
)
from .identity import Identity, identities_equal, time_ms
from .inet import InetAddress
from .suite import SUITES, KeyEncoding, SuiteParams, SuiteType

__all__ = [
    # Main types
    "Identity",
    "Address",
    "InetAddress",
    "SuiteType",
    # Suite table
    "SUITES",
    "SuiteParams",
    "KeyEncoding",
    # Canonical text
    "IdentityFields",
    "parse_identity",
    "format_public",
    "format_secret",
    # Helpers
    "identities_equal",
    "time_ms",
    # Exceptions
    "IdentityError",
    "InvalidParameter",
    "InvalidAddressString",
    "MalformedIdentity",
    "UnrecognizedSuite",
    "InvalidKey",
    "EmptyAddressList",
    "InvalidAddress",
    "EngineInitError",
    "RootSpecificationError",
    "InternalEngineError",
    "EngineError",
]
