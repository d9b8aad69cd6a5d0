"""
Node addresses.

An address is the short, 40-bit name of a node in the overlay. It is
derived from the node's public key by the cryptographic engine, which is
what makes the name self-certifying.

Text form is exactly ten hexadecimal digits::

    89e92ceee5

Two ranges are reserved and never assigned to a node:
    - 0x0000000000
    - 0xff00000000 - 0xffffffffff
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, Final, SupportsInt

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .errors import InvalidAddressString

ADDRESS_STRING_LENGTH: Final[int] = 10
"""Number of hex digits in the text form of an address."""

ADDRESS_RESERVED_PREFIX: Final[int] = 0xFF
"""Top byte reserved for multicast and testing."""

_HEX_ADDRESS = re.compile(r"[0-9a-fA-F]{10}")


class Address(int):
    """A 40-bit node address that inherits from `int`."""

    BITS: ClassVar[int] = 40
    """Width of an address in bits."""

    LENGTH: ClassVar[int] = 5
    """Width of an address in bytes."""

    def __new__(cls, value: SupportsInt) -> Self:
        """
        Create and validate a new Address.

        Raises:
            OverflowError: If `value` does not fit in 40 bits.
        """
        int_value = int(value)
        if not (0 <= int_value < (2**cls.BITS)):
            raise OverflowError(f"{int_value} is out of range for {cls.__name__}")
        return super().__new__(cls, int_value)

    @classmethod
    def from_string(cls, text: str) -> Self:
        """
        Parse an address from its ten-digit hex form.

        Upper case digits are accepted. The zero address is rejected.

        Raises:
            InvalidAddressString: If the text is not a usable address.
        """
        if len(text) != ADDRESS_STRING_LENGTH:
            raise InvalidAddressString(
                text, f"expected {ADDRESS_STRING_LENGTH} hex digits, got {len(text)}"
            )
        if not _HEX_ADDRESS.fullmatch(text):
            raise InvalidAddressString(text, "not hexadecimal")
        value = int(text, 16)
        if value == 0:
            raise InvalidAddressString(text, "zero address")
        return cls(value)

    @classmethod
    def from_bytes(cls, data: bytes) -> Self:  # type: ignore[override]
        """Build an address from its 5-byte big-endian form."""
        if len(data) != cls.LENGTH:
            raise ValueError(f"Address requires exactly {cls.LENGTH} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "big"))

    def to_bytes(self) -> bytes:  # type: ignore[override]
        """Return the 5-byte big-endian form."""
        return int(self).to_bytes(self.LENGTH, "big")

    def is_reserved(self) -> bool:
        """Check whether this address can never be assigned to a node."""
        return self == 0 or (int(self) >> 32) == ADDRESS_RESERVED_PREFIX

    def __str__(self) -> str:
        """Return the ten-digit lowercase hex form."""
        return f"{int(self):010x}"

    def __repr__(self) -> str:
        return f"Address({self!s})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        Instances pass through. Strings are parsed as hex, integers are range
        checked. Serialization uses the hex text form.
        """

        def validate(value: Any) -> Address:
            if isinstance(value, cls):
                return value
            if isinstance(value, str):
                return cls.from_string(value)
            try:
                return cls(value)
            except (OverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )
