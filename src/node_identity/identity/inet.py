"""
Network endpoint addresses.

Root specifications carry the static IP endpoints of a root node. The
overlay writes endpoints as ``ip/port``::

    203.0.113.7/9993
    2001:db8::1/9993

The engine consumes endpoints in a fixed binary layout, the native address
storage::

    [family (1)][ip (4 or 16)][port (2, big-endian)]
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Final

from typing_extensions import Self

AF_INET: Final[int] = 4
"""Family tag for IPv4 endpoints."""

AF_INET6: Final[int] = 6
"""Family tag for IPv6 endpoints."""


@dataclass(frozen=True, slots=True)
class InetAddress:
    """
    An IP address and port.

    The IP is kept as text so that endpoints can be described before they
    are checked. Validation happens on conversion to native storage.

    Attributes:
        ip: IPv4 or IPv6 address text.
        port: UDP port.
    """

    ip: str
    port: int

    @classmethod
    def from_string(cls, text: str) -> Self:
        """
        Parse an ``ip/port`` endpoint.

        Raises:
            ValueError: If there is no port separator or the port is not a number.
        """
        ip, sep, port = text.strip().rpartition("/")
        if not sep or not ip:
            raise ValueError(f"Expected ip/port, got {text!r}")
        return cls(ip=ip, port=int(port))

    def to_sockaddr(self) -> bytes:
        """
        Convert to native address storage.

        Raises:
            ValueError: If the IP does not parse or the port is not an integer
                in 1..65535.
        """
        if not isinstance(self.port, int) or isinstance(self.port, bool):
            raise ValueError(f"Port must be an integer, got {type(self.port).__name__}")
        ip = ipaddress.ip_address(self.ip)
        if not (0 < self.port <= 0xFFFF):
            raise ValueError(f"Port out of range: {self.port}")

        family = AF_INET if ip.version == 4 else AF_INET6
        return bytes([family]) + ip.packed + self.port.to_bytes(2, "big")

    def __str__(self) -> str:
        return f"{self.ip}/{self.port}"


def make_sockaddr_storage(address: object) -> bytes | None:
    """Convert an endpoint to native storage, or None if it is unusable."""
    if not isinstance(address, InetAddress):
        return None
    try:
        return address.to_sockaddr()
    except (ValueError, TypeError):
        return None
