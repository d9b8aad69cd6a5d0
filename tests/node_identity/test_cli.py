"""Tests for the node_identity command line."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from node_identity import __main__ as cli
from node_identity.__main__ import (
    EXIT_BAD_INPUT,
    EXIT_CHECK_FAILED,
    EXIT_OK,
    main,
    read_identity_argument,
    setup_logging,
)
from node_identity.engine import decode_root_specification
from node_identity.identity import Identity, SuiteType


@pytest.fixture(autouse=True)
def _no_root_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep main() from installing handlers on the root logger."""
    monkeypatch.setattr(cli, "setup_logging", lambda verbose=False: None)


@pytest.fixture
def secret_file(tmp_path: Path) -> Path:
    """File holding the secret form of a fresh identity."""
    path = tmp_path / "identity.secret"
    path.write_text(Identity.generate().private_key_string() + "\n")
    return path


@pytest.fixture
def message_file(tmp_path: Path) -> Path:
    """File holding a message to sign."""
    path = tmp_path / "message.txt"
    path.write_bytes(b"hello world\n")
    return path


class TestGenerate:
    """Tests for the generate command."""

    def test_prints_secret(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Without files the secret form is printed."""
        assert main(["generate"]) == EXIT_OK
        identity = Identity.from_string(capsys.readouterr().out)
        assert identity.has_private
        assert identity.suite == SuiteType.C25519

    def test_writes_files(self, tmp_path: Path) -> None:
        """Both forms are written when paths are given."""
        secret = tmp_path / "id.secret"
        public = tmp_path / "id.public"
        assert main(["generate", "--type", "1", str(secret), str(public)]) == EXIT_OK

        identity = Identity.from_string(secret.read_text())
        assert identity.suite == SuiteType.P384
        assert Identity.from_string(public.read_text()) == identity.public_only()

    def test_rejects_unknown_type(self) -> None:
        """Only suites 0 and 1 can be generated."""
        with pytest.raises(SystemExit):
            main(["generate", "--type", "2"])


class TestCommands:
    """Tests for the commands that use an existing identity."""

    def test_getpublic(self, secret_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """getpublic prints the public form."""
        assert main(["getpublic", str(secret_file)]) == EXIT_OK
        expected = Identity.from_string(secret_file.read_text()).to_string()
        assert capsys.readouterr().out.strip() == expected

    def test_validate_literal(
        self, secret_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Identity strings are accepted literally."""
        text = secret_file.read_text().strip()
        assert main(["validate", text]) == EXIT_OK
        assert "is a valid identity" in capsys.readouterr().out

    def test_validate_fails(self, capsys: pytest.CaptureFixture[str]) -> None:
        """A tampered identity fails validation with exit status 1."""
        identity = Identity.generate()
        address = f"{int(identity.address) ^ 1:010x}"
        text = f"{address}:0:{identity.public_key.hex()}"
        assert main(["validate", text]) == EXIT_CHECK_FAILED
        assert "FAILED validation" in capsys.readouterr().out

    def test_sign_then_verify(
        self, secret_file: Path, message_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A signature printed by sign is accepted by verify."""
        assert main(["sign", str(secret_file), str(message_file)]) == EXIT_OK
        signature = capsys.readouterr().out.strip()

        public = Identity.from_string(secret_file.read_text()).to_string()
        assert main(["verify", public, str(message_file), signature]) == EXIT_OK
        assert "signature check OK" in capsys.readouterr().out

    def test_verify_rejects(
        self, secret_file: Path, message_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A wrong signature exits with status 1."""
        status = main(["verify", str(secret_file), str(message_file), "00" * 64])
        assert status == EXIT_CHECK_FAILED
        assert "signature check FAILED" in capsys.readouterr().out

    def test_makeroot(self, secret_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """makeroot prints a decodable root specification."""
        status = main(["makeroot", str(secret_file), "203.0.113.7/9993", "2001:db8::1/9993"])
        assert status == EXIT_OK

        root = decode_root_specification(bytes.fromhex(capsys.readouterr().out.strip()))
        assert [str(a) for a in root.inet_addresses()] == ["203.0.113.7/9993", "2001:db8::1/9993"]

    def test_bad_identity(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Unparseable identities exit with status 2."""
        assert main(["getpublic", "89e92ceee5:2:00"]) == EXIT_BAD_INPUT
        assert capsys.readouterr().err.startswith("ERROR:")

    def test_public_identity_cannot_sign(
        self, secret_file: Path, message_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Signing with a public identity exits with status 2."""
        public = Identity.from_string(secret_file.read_text()).to_string()
        assert main(["sign", public, str(message_file)]) == EXIT_BAD_INPUT
        assert "cannot sign" in capsys.readouterr().err

    def test_bad_endpoint(self, secret_file: Path) -> None:
        """Malformed endpoints exit with status 2."""
        assert main(["makeroot", str(secret_file), "203.0.113.7"]) == EXIT_BAD_INPUT


class TestReadIdentityArgument:
    """Tests for read_identity_argument."""

    def test_file(self, secret_file: Path) -> None:
        """File contents are read and stripped."""
        assert read_identity_argument(str(secret_file)) == secret_file.read_text().strip()

    def test_literal(self) -> None:
        """Other arguments pass through."""
        assert read_identity_argument("89e92ceee5:0:00") == "89e92ceee5:0:00"

    def test_long_literal(self) -> None:
        """Arguments longer than a file name are treated as text."""
        text = "a" * 5000
        assert read_identity_argument(text) == text


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.mark.parametrize(
        ("verbose", "level"), [(False, logging.WARNING), (True, logging.DEBUG)]
    )
    def test_levels(self, verbose: bool, level: int) -> None:
        """Verbose switches the root logger to debug."""
        root = logging.getLogger()
        saved_level, saved_handlers = root.level, list(root.handlers)
        try:
            setup_logging(verbose)
            assert root.level == level
            assert len(root.handlers) == len(saved_handlers) + 1
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
