"""Strict pydantic base model for identity records."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictBaseModel(BaseModel):
    """
    An immutable, strictly validated record.

    Field names are camel case in JSON, so `public_key` is written as
    `publicKey`. Byte fields are written as lowercase hex.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        extra="forbid",
        frozen=True,
        strict=True,
        ser_json_bytes="hex",
        val_json_bytes="hex",
    )
