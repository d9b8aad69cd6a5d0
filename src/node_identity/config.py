"""
Global configuration for the node identity library.

This module contains environment-specific settings that apply across the
identity model and the reference cryptographic engine.
"""

import os

_SUPPORTED_NODE_IDENTITY_ENVS: list[str] = ["prod", "test"]

NODE_IDENTITY_ENV = os.environ.get("NODE_IDENTITY_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if NODE_IDENTITY_ENV not in _SUPPORTED_NODE_IDENTITY_ENVS:
    raise ValueError(
        f"Invalid NODE_IDENTITY_ENV environment variable: '{NODE_IDENTITY_ENV}'. "
        f"Supported values: {_SUPPORTED_NODE_IDENTITY_ENVS}"
    )

_SCRYPT_PARAMS: dict[str, tuple[int, int, int]] = {
    "prod": (2**11, 8, 1),
    "test": (2**4, 1, 1),
}

SCRYPT_N, SCRYPT_R, SCRYPT_P = _SCRYPT_PARAMS[NODE_IDENTITY_ENV]
"""
scrypt work factor used to bind Curve25519 public keys to their address.

The production setting needs 2 MiB of memory per attempt. Identities generated
under one environment do not validate under the other.
"""
