"""
Canonical identity text.

An identity is written as colon-separated fields::

    <address>:<suite>:<public key>[:<private key>]

    89e92ceee5:0:<128 hex digits>
    89e92ceee5:0:<128 hex digits>:<128 hex digits>
    1f2e3d4c5b:1:<183 base-32 chars>:<180 base-32 chars>

The address is ten lowercase hex digits. The suite tag is ``0`` or ``1``
and selects the key encoding (see `suite`). The private key field is
optional; without it the identity is public-only.

This grammar is the persisted and transmitted form of an identity. Nodes
that disagree on a single byte of it reject each other.
"""

from __future__ import annotations

from dataclasses import dataclass

from .address import Address
from .errors import InvalidKey, MalformedIdentity, UnrecognizedSuite
from .suite import SUITES, SuiteType, suite_from_tag

FIELD_SEPARATOR = ":"
"""Separator between identity fields."""


@dataclass(frozen=True, slots=True)
class IdentityFields:
    """
    The decoded fields of an identity string.

    Attributes:
        address: Node address.
        suite: Cryptographic suite.
        public_key: Raw public key bytes.
        private_key: Raw private key bytes, or None for a public-only identity.
    """

    address: Address
    suite: SuiteType
    public_key: bytes
    private_key: bytes | None = None


def parse_identity(text: str) -> IdentityFields:
    """
    Decode an identity string.

    Curve25519 keys are not length checked here. P-384 keys must have the
    exact suite sizes.

    Raises:
        MalformedIdentity: Fewer than three fields.
        InvalidAddressString: The address field is not a usable address.
        UnrecognizedSuite: The suite tag is not ``0`` or ``1``.
        InvalidKey: A P-384 key has the wrong decoded length.
        binascii.Error: A key field does not decode.
    """
    fields = text.strip().split(FIELD_SEPARATOR)
    if len(fields) < 3:
        raise MalformedIdentity(
            f"Identity requires at least 3 fields (address:suite:public), got {len(fields)}"
        )

    address = Address.from_string(fields[0])

    suite = suite_from_tag(fields[1])
    if suite is None:
        raise UnrecognizedSuite(fields[1])
    params = SUITES[suite]

    public_key = params.encoding.decode(fields[2])
    if params.strict_parse and len(public_key) != params.public_key_size:
        raise InvalidKey.wrong_length(
            params.name, "public", expected=params.public_key_size, actual=len(public_key)
        )

    private_key: bytes | None = None
    if len(fields) >= 4:
        private_key = params.encoding.decode(fields[3])
        if params.strict_parse and len(private_key) != params.private_key_size:
            raise InvalidKey.wrong_length(
                params.name, "private", expected=params.private_key_size, actual=len(private_key)
            )

    return IdentityFields(
        address=address,
        suite=suite,
        public_key=public_key,
        private_key=private_key,
    )


def format_public(fields: IdentityFields) -> str:
    """
    Render the public form (three fields).

    Returns an empty string if the public key does not have the exact size
    of the suite.
    """
    params = SUITES[fields.suite]
    if len(fields.public_key) != params.public_key_size:
        return ""
    return FIELD_SEPARATOR.join(
        [
            str(fields.address),
            str(int(fields.suite)),
            params.encoding.encode(fields.public_key),
        ]
    )


def format_secret(fields: IdentityFields) -> str:
    """
    Render the secret form (four fields).

    Returns an empty string unless both keys are present with the exact
    sizes of the suite.
    """
    params = SUITES[fields.suite]
    if fields.private_key is None or len(fields.private_key) != params.private_key_size:
        return ""
    public = format_public(fields)
    if not public:
        return ""
    return public + FIELD_SEPARATOR + params.encoding.encode(fields.private_key)
