"""
Node identity CLI entry point.

Create, inspect and use node identities from the command line.

Usage::

    python -m node_identity generate [--type 0|1] [SECRET_FILE] [PUBLIC_FILE]
    python -m node_identity getpublic SECRET
    python -m node_identity validate IDENTITY
    python -m node_identity sign SECRET FILE
    python -m node_identity verify IDENTITY FILE SIGNATURE
    python -m node_identity makeroot SECRET ADDRESS [ADDRESS ...]

IDENTITY and SECRET are either an identity string or a path to a file that
contains one. Signatures and root specifications are printed as hex.
Addresses use the ip/port form, e.g. 203.0.113.7/9993.

Exit status is 0 on success, 1 when a check fails, 2 on bad input.
"""

from __future__ import annotations

import argparse
import binascii
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from node_identity.identity import IdentityError, InetAddress, SuiteType
from node_identity.identity.identity import Identity

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_BAD_INPUT = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.WARNING

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def read_identity_argument(argument: str) -> str:
    """
    Resolve an identity argument to identity text.

    An argument naming an existing file is replaced by the file's contents.
    """
    path = Path(argument)
    try:
        is_file = path.is_file()
    except OSError:
        # Identity strings are longer than most file name limits.
        is_file = False
    if is_file:
        return path.read_text().strip()
    return argument


def load_identity(argument: str) -> Identity:
    """Parse an identity given literally or by file path."""
    return Identity.from_string(read_identity_argument(argument))


def _write_or_print(text: str, path: Path | None) -> None:
    if path is None:
        print(text)
    else:
        path.write_text(text + "\n")


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate an identity and print or save both forms."""
    identity = Identity.generate(SuiteType(args.type))
    with identity:
        _write_or_print(identity.private_key_string(), args.secret_file)
        if args.public_file is not None:
            _write_or_print(identity.to_string(), args.public_file)
    logger.info("Generated identity %s", identity.address)
    return EXIT_OK


def cmd_getpublic(args: argparse.Namespace) -> int:
    """Print the public form of an identity."""
    print(load_identity(args.identity).to_string())
    return EXIT_OK


def cmd_validate(args: argparse.Namespace) -> int:
    """Exit 0 if the identity passes local validation."""
    with load_identity(args.identity) as identity:
        if identity.locally_validate():
            print(f"{identity.address} is a valid identity")
            return EXIT_OK
        print(f"{identity.address} FAILED validation")
        return EXIT_CHECK_FAILED


def cmd_sign(args: argparse.Namespace) -> int:
    """Sign a file and print the signature as hex."""
    message = Path(args.file).read_bytes()
    with load_identity(args.identity) as identity:
        print(identity.sign(message).hex())
    return EXIT_OK


def cmd_verify(args: argparse.Namespace) -> int:
    """Exit 0 if the hex signature over the file is valid."""
    message = Path(args.file).read_bytes()
    signature = binascii.unhexlify(args.signature.strip())
    with load_identity(args.identity) as identity:
        if identity.verify(message, signature):
            print("signature check OK")
            return EXIT_OK
    print("signature check FAILED")
    return EXIT_CHECK_FAILED


def cmd_makeroot(args: argparse.Namespace) -> int:
    """Print a root specification for the identity and endpoints as hex."""
    addresses = [InetAddress.from_string(address) for address in args.addresses]
    with load_identity(args.identity) as identity:
        print(identity.make_root(addresses).hex())
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="node_identity",
        description="Node identity tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate a new identity")
    generate.add_argument(
        "--type",
        type=int,
        choices=[int(suite) for suite in SuiteType],
        default=int(SuiteType.C25519),
        help="Suite: 0 = Curve25519 (default), 1 = P-384",
    )
    generate.add_argument(
        "secret_file", nargs="?", type=Path, help="Where to write the secret form"
    )
    generate.add_argument(
        "public_file", nargs="?", type=Path, help="Where to write the public form"
    )
    generate.set_defaults(handler=cmd_generate)

    getpublic = commands.add_parser("getpublic", help="Print the public form of an identity")
    getpublic.add_argument("identity")
    getpublic.set_defaults(handler=cmd_getpublic)

    validate = commands.add_parser("validate", help="Locally validate an identity")
    validate.add_argument("identity")
    validate.set_defaults(handler=cmd_validate)

    sign = commands.add_parser("sign", help="Sign a file")
    sign.add_argument("identity")
    sign.add_argument("file")
    sign.set_defaults(handler=cmd_sign)

    verify = commands.add_parser("verify", help="Verify a signature over a file")
    verify.add_argument("identity")
    verify.add_argument("file")
    verify.add_argument("signature", help="Hex signature")
    verify.set_defaults(handler=cmd_verify)

    makeroot = commands.add_parser("makeroot", help="Make a root specification")
    makeroot.add_argument("identity")
    makeroot.add_argument("addresses", nargs="+", metavar="ADDRESS", help="ip/port endpoint")
    makeroot.set_defaults(handler=cmd_makeroot)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.handler(args)
    except (IdentityError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
