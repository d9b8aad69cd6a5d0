"""Exception hierarchy for node identities."""

from __future__ import annotations


class IdentityError(Exception):
    """
    Base exception for all identity-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidParameter(IdentityError):
    """Raised when a null or unusable engine handle is passed in."""


class InvalidAddressString(IdentityError, ValueError):
    """
    Raised when a node address cannot be parsed from text.

    Attributes:
        text: The rejected input.
    """

    def __init__(self, text: str, detail: str) -> None:
        self.text = text
        super().__init__(f"Invalid node address {text!r}: {detail}")


class MalformedIdentity(IdentityError):
    """Raised when identity text does not follow the address:suite:key grammar."""


class UnrecognizedSuite(IdentityError):
    """
    Raised when the suite tag of an identity is neither 0 nor 1.

    Attributes:
        tag: The suite tag as it appeared in the text.
    """

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unrecognized identity suite {tag!r}")


class InvalidKey(IdentityError):
    """
    Raised when key material is unusable for the requested operation.

    Covers wrong key lengths for a suite as well as signing preconditions
    (no handle, no private key).

    Attributes:
        suite: The suite name, when the error is about a key length.
        expected: The exact length required by the suite.
        actual: The length that was decoded.
    """

    def __init__(
        self,
        message: str,
        *,
        suite: str | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        self.suite = suite
        self.expected = expected
        self.actual = actual
        super().__init__(message)

    @classmethod
    def wrong_length(cls, suite: str, which: str, *, expected: int, actual: int) -> InvalidKey:
        """Build the error raised when a decoded key has the wrong size."""
        return cls(
            f"{suite} {which} key requires exactly {expected} bytes, got {actual}",
            suite=suite,
            expected=expected,
            actual=actual,
        )


class EmptyAddressList(IdentityError):
    """Raised when a root specification is requested without any address."""

    def __init__(self) -> None:
        super().__init__("at least one static address must be specified for a root")


class InvalidAddress(IdentityError):
    """Raised when a network address cannot be converted to native storage."""


class EngineInitError(IdentityError):
    """Raised when the engine handle for an identity cannot be created."""


class RootSpecificationError(IdentityError):
    """Raised when the engine produces no root specification."""


class InternalEngineError(IdentityError):
    """Raised when the engine returns a null or unusable result unexpectedly."""


class EngineError(IdentityError):
    """Raised when the engine cannot generate an identity."""
