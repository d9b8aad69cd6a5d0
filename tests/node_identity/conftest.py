"""
Shared pytest fixtures for node_identity tests.

Provides generated identities of both suites and an engine that records
handle traffic.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from node_identity.engine import DefaultEngine, EngineHandle, GeneratedKeys
from node_identity.identity import Identity, SuiteType


class RecordingEngine(DefaultEngine):
    """Reference engine that counts handle creation and release."""

    def __init__(self) -> None:
        self.created: list[EngineHandle] = []
        self.released: list[EngineHandle] = []
        self.texts: list[str] = []

    def handle_from_text(self, text: str) -> EngineHandle | None:
        self.texts.append(text)
        handle = super().handle_from_text(text)
        if handle is not None:
            self.created.append(handle)
        return handle

    def release(self, handle: EngineHandle) -> None:
        self.released.append(handle)
        super().release(handle)


class FailingEngine(DefaultEngine):
    """Engine whose primitives misbehave, for fail-closed checks."""

    def generate(self, suite: SuiteType) -> GeneratedKeys | None:
        return None

    def verify(self, handle: EngineHandle, message: bytes, signature: bytes) -> bool:
        raise RuntimeError("engine exploded")

    def sign(self, handle: EngineHandle, message: bytes, max_length: int) -> bytes:
        return b""

    def make_root_specification(
        self,
        handle: EngineHandle,
        timestamp_ms: int,
        addresses: Sequence[bytes],
        max_length: int,
    ) -> bytes:
        return b""


@pytest.fixture
def recording_engine() -> RecordingEngine:
    """Fresh recording engine."""
    return RecordingEngine()


@pytest.fixture
def failing_engine() -> FailingEngine:
    """Engine that fails every primitive it overrides."""
    return FailingEngine()


@pytest.fixture
def c25519_identity() -> Identity:
    """Freshly generated Curve25519 identity with its private key."""
    return Identity.generate(SuiteType.C25519)


@pytest.fixture
def p384_identity() -> Identity:
    """Freshly generated P-384 identity with its private key."""
    return Identity.generate(SuiteType.P384)


@pytest.fixture(params=[SuiteType.C25519, SuiteType.P384], ids=["c25519", "p384"])
def any_identity(request: pytest.FixtureRequest) -> Identity:
    """Freshly generated identity of each suite."""
    return Identity.generate(request.param)
