"""
Root specification format.

A root specification tells nodes how to reach a root server. It is the
root's public identity followed by a signed locator listing the root's
static endpoints::

    root_spec = identity || locator

    identity = address (5) || suite (1) || public_key || 0x00
    locator  = timestamp_ms (8) || signer (5) || count (2) || endpoints
               || signature_length (2) || signature

    endpoint = family (1) || ip (4 or 16) || port (2)

All integers are big-endian. The trailing zero byte of the identity section
marks the absence of a private key. The signature covers the locator from
the timestamp up to, but excluding, the signature length.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable, Sequence
from typing import Final

from node_identity.identity.address import Address
from node_identity.identity.inet import AF_INET, AF_INET6, InetAddress
from node_identity.identity.suite import SUITES, SuiteType
from node_identity.types import StrictBaseModel

MAX_ENDPOINTS: Final[int] = 0xFFFF
"""Largest endpoint count the locator can carry."""

_IP_SIZES: Final[dict[int, int]] = {AF_INET: 4, AF_INET6: 16}


class RootSpecification(StrictBaseModel):
    """A decoded root specification."""

    address: Address
    """Root node address."""

    suite: SuiteType
    """Root identity suite."""

    public_key: bytes
    """Root public key."""

    timestamp_ms: int
    """Locator timestamp in milliseconds since the epoch."""

    endpoints: list[bytes]
    """Static endpoints in native storage form."""

    signed_data: bytes
    """Locator bytes covered by the signature."""

    signature: bytes
    """Locator signature by the root identity."""

    def inet_addresses(self) -> list[InetAddress]:
        """Endpoints as `InetAddress` values."""
        return [inet_from_sockaddr(endpoint) for endpoint in self.endpoints]


def inet_from_sockaddr(data: bytes) -> InetAddress:
    """
    Convert native address storage back to an `InetAddress`.

    Raises:
        ValueError: If the family is unknown or the length does not match it.
    """
    if not data or data[0] not in _IP_SIZES:
        raise ValueError("Unknown address family")
    ip_size = _IP_SIZES[data[0]]
    if len(data) != 1 + ip_size + 2:
        raise ValueError(f"Endpoint requires {1 + ip_size + 2} bytes, got {len(data)}")
    ip = ipaddress.ip_address(data[1 : 1 + ip_size])
    return InetAddress(ip=str(ip), port=int.from_bytes(data[1 + ip_size :], "big"))


def encode_root_specification(
    address: Address,
    suite: SuiteType,
    public_key: bytes,
    timestamp_ms: int,
    endpoints: Sequence[bytes],
    sign: Callable[[bytes], bytes],
) -> bytes:
    """
    Serialize and sign a root specification.

    Args:
        address: Root node address.
        suite: Root identity suite.
        public_key: Root public key.
        timestamp_ms: Locator timestamp.
        endpoints: Endpoints in native storage form.
        sign: Signs the locator body with the root's private key.

    Raises:
        ValueError: If there are too many endpoints or the timestamp does not fit in 8 bytes.
    """
    if len(endpoints) > MAX_ENDPOINTS:
        raise ValueError(f"Too many endpoints: {len(endpoints)}")
    if not (0 <= timestamp_ms < 2**64):
        raise ValueError(f"Timestamp out of range: {timestamp_ms}")

    identity = address.to_bytes() + bytes([int(suite)]) + public_key + b"\x00"

    body = (
        timestamp_ms.to_bytes(8, "big")
        + address.to_bytes()
        + len(endpoints).to_bytes(2, "big")
        + b"".join(endpoints)
    )
    signature = sign(body)

    return identity + body + len(signature).to_bytes(2, "big") + signature


class _Reader:
    """Cursor over a byte string that fails on truncation."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def take(self, n: int) -> bytes:
        end = self.offset + n
        if end > len(self.data):
            raise ValueError(
                f"Root specification truncated: needed {n} bytes at offset {self.offset}"
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def uint(self, n: int) -> int:
        return int.from_bytes(self.take(n), "big")


def decode_root_specification(data: bytes) -> RootSpecification:
    """
    Parse a root specification.

    The signature is not checked here; verify `signed_data` against
    `signature` with the root identity.

    Raises:
        ValueError: If the data is truncated, has trailing bytes, or uses an
            unknown suite or address family.
    """
    reader = _Reader(data)

    address = Address.from_bytes(reader.take(Address.LENGTH))
    suite = SuiteType(reader.uint(1))
    public_key = reader.take(SUITES[suite].public_key_size)
    if reader.uint(1) != 0:
        raise ValueError("Root specification must not carry a private key")

    body_start = reader.offset
    timestamp_ms = reader.uint(8)
    signer = Address.from_bytes(reader.take(Address.LENGTH))
    if signer != address:
        raise ValueError(f"Locator signer {signer} does not match root {address}")

    endpoints: list[bytes] = []
    for _ in range(reader.uint(2)):
        family = reader.take(1)
        if family[0] not in _IP_SIZES:
            raise ValueError(f"Unknown address family: {family[0]}")
        endpoints.append(family + reader.take(_IP_SIZES[family[0]] + 2))
    signed_data = data[body_start : reader.offset]

    signature = reader.take(reader.uint(2))
    if reader.offset != len(data):
        raise ValueError(f"Trailing bytes after root specification: {len(data) - reader.offset}")

    return RootSpecification(
        address=address,
        suite=suite,
        public_key=public_key,
        timestamp_ms=timestamp_ms,
        endpoints=endpoints,
        signed_data=signed_data,
        signature=signature,
    )
