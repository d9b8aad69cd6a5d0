"""Tests for the canonical identity text."""

import binascii

import pytest
from hypothesis import given
from hypothesis import strategies as st

from node_identity.identity import (
    Address,
    IdentityFields,
    InvalidAddressString,
    InvalidKey,
    MalformedIdentity,
    SuiteType,
    UnrecognizedSuite,
    format_public,
    format_secret,
    parse_identity,
)
from node_identity.identity.codec import base32_encode

ADDRESS = "89e92ceee5"

C25519_PUBLIC = bytes(range(64))
C25519_PRIVATE = bytes(range(64, 128))
P384_PUBLIC = bytes(range(114))
P384_PRIVATE = bytes(range(100, 212))


class TestParseIdentity:
    """Tests for parse_identity."""

    def test_public_c25519(self) -> None:
        """Three fields give a public-only identity."""
        fields = parse_identity(f"{ADDRESS}:0:{C25519_PUBLIC.hex()}")
        assert fields.address == Address(0x89E92CEEE5)
        assert fields.suite == SuiteType.C25519
        assert fields.public_key == C25519_PUBLIC
        assert fields.private_key is None

    def test_secret_c25519(self) -> None:
        """The fourth field is the private key."""
        fields = parse_identity(f"{ADDRESS}:0:{C25519_PUBLIC.hex()}:{C25519_PRIVATE.hex()}")
        assert fields.private_key == C25519_PRIVATE

    def test_secret_p384(self) -> None:
        """P-384 keys use base-32."""
        text = f"{ADDRESS}:1:{base32_encode(P384_PUBLIC)}:{base32_encode(P384_PRIVATE)}"
        fields = parse_identity(text)
        assert fields.suite == SuiteType.P384
        assert fields.public_key == P384_PUBLIC
        assert fields.private_key == P384_PRIVATE

    def test_surrounding_whitespace_ignored(self) -> None:
        """Leading and trailing whitespace is stripped."""
        fields = parse_identity(f"  {ADDRESS}:0:{C25519_PUBLIC.hex()}\n")
        assert fields.public_key == C25519_PUBLIC

    def test_extra_fields_ignored(self) -> None:
        """Fields after the private key are not interpreted."""
        fields = parse_identity(
            f"{ADDRESS}:0:{C25519_PUBLIC.hex()}:{C25519_PRIVATE.hex()}:whatever"
        )
        assert fields.private_key == C25519_PRIVATE

    @pytest.mark.parametrize("text", ["", ADDRESS, f"{ADDRESS}:0"])
    def test_too_few_fields(self, text: str) -> None:
        """Fewer than three fields is malformed."""
        with pytest.raises(MalformedIdentity):
            parse_identity(text)

    def test_bad_address(self) -> None:
        """Address errors propagate unchanged."""
        with pytest.raises(InvalidAddressString):
            parse_identity(f"0000000000:0:{C25519_PUBLIC.hex()}")

    @pytest.mark.parametrize("tag", ["2", "", "00", " 0", "c25519", "-1"])
    def test_unknown_suite(self, tag: str) -> None:
        """Only the exact tags 0 and 1 are accepted."""
        with pytest.raises(UnrecognizedSuite) as excinfo:
            parse_identity(f"{ADDRESS}:{tag}:{C25519_PUBLIC.hex()}")
        assert excinfo.value.tag == tag

    @given(st.text(alphabet=st.characters(exclude_characters=":"), max_size=8))
    def test_any_other_suite_tag_rejected(self, tag: str) -> None:
        """Every tag other than 0 and 1 is an unrecognized suite."""
        if tag in ("0", "1"):
            return
        with pytest.raises(UnrecognizedSuite):
            parse_identity(f"{ADDRESS}:{tag}:00")

    def test_bad_hex_key(self) -> None:
        """Hex decoding errors propagate."""
        with pytest.raises(binascii.Error):
            parse_identity(f"{ADDRESS}:0:xyz")

    def test_bad_base32_key(self) -> None:
        """Base-32 decoding errors propagate."""
        with pytest.raises(binascii.Error):
            parse_identity(f"{ADDRESS}:1:{base32_encode(P384_PUBLIC).upper()}")

    def test_c25519_lengths_not_checked(self) -> None:
        """Curve25519 keys of any length parse."""
        fields = parse_identity(f"{ADDRESS}:0:abcd:ef")
        assert fields.public_key == b"\xab\xcd"
        assert fields.private_key == b"\xef"

    @given(st.integers(min_value=0, max_value=300).filter(lambda n: n != 114))
    def test_p384_public_length_enforced(self, size: int) -> None:
        """A P-384 public key must decode to exactly 114 bytes."""
        with pytest.raises(InvalidKey) as excinfo:
            parse_identity(f"{ADDRESS}:1:{base32_encode(bytes(size))}")
        assert excinfo.value.expected == 114
        assert excinfo.value.actual == size

    @given(st.integers(min_value=0, max_value=300).filter(lambda n: n != 112))
    def test_p384_private_length_enforced(self, size: int) -> None:
        """A P-384 private key must decode to exactly 112 bytes."""
        with pytest.raises(InvalidKey) as excinfo:
            parse_identity(
                f"{ADDRESS}:1:{base32_encode(P384_PUBLIC)}:{base32_encode(bytes(size))}"
            )
        assert excinfo.value.expected == 112
        assert excinfo.value.actual == size

    def test_wrong_length_message(self) -> None:
        """The error names the suite and both sizes."""
        with pytest.raises(InvalidKey, match="P384 public key requires exactly 114 bytes, got 3"):
            parse_identity(f"{ADDRESS}:1:{base32_encode(b'abc')}")


class TestFormat:
    """Tests for format_public and format_secret."""

    def test_public_form(self) -> None:
        """The public form has three fields."""
        fields = IdentityFields(Address(0x89E92CEEE5), SuiteType.C25519, C25519_PUBLIC)
        assert format_public(fields) == f"{ADDRESS}:0:{C25519_PUBLIC.hex()}"

    def test_secret_form(self) -> None:
        """The secret form appends the private key."""
        fields = IdentityFields(
            Address(0x89E92CEEE5), SuiteType.P384, P384_PUBLIC, P384_PRIVATE
        )
        assert format_secret(fields) == (
            f"{ADDRESS}:1:{base32_encode(P384_PUBLIC)}:{base32_encode(P384_PRIVATE)}"
        )

    def test_address_is_zero_padded(self) -> None:
        """Small addresses keep ten digits."""
        fields = IdentityFields(Address(0x42), SuiteType.C25519, C25519_PUBLIC)
        assert format_public(fields).startswith("0000000042:0:")

    def test_wrong_public_size_gives_empty(self) -> None:
        """A public key of the wrong size has no text form."""
        fields = IdentityFields(Address(1), SuiteType.C25519, b"\x01\x02")
        assert format_public(fields) == ""
        assert format_secret(fields) == ""

    def test_no_private_gives_empty_secret(self) -> None:
        """A public-only identity has no secret form."""
        fields = IdentityFields(Address(1), SuiteType.C25519, C25519_PUBLIC)
        assert format_secret(fields) == ""

    def test_wrong_private_size_gives_empty_secret(self) -> None:
        """A private key of the wrong size has no secret form."""
        fields = IdentityFields(Address(1), SuiteType.C25519, C25519_PUBLIC, b"\x01")
        assert format_secret(fields) == ""
        assert format_public(fields) != ""

    def test_parse_of_formatted(self) -> None:
        """Formatted text parses back to the same fields."""
        fields = IdentityFields(
            Address(0x89E92CEEE5), SuiteType.C25519, C25519_PUBLIC, C25519_PRIVATE
        )
        assert parse_identity(format_secret(fields)) == fields
