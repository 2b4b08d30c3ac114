"""Strict base models and the canonical byte encoding shared by all containers."""

from __future__ import annotations

import hashlib

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing_extensions import Self


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `target_block_utilization` is written as
    `targetBlockUtilization` in genesis documents and in the stored encoding.
    Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }


class Container(StrictBaseModel):
    """
    A strict model with a canonical, deterministic byte encoding.

    The encoding is compact JSON:

    - Fields appear in definition order, under their camelCase alias.
    - No insignificant whitespace.
    - Decimals are fixed-width strings with 18 fractional digits.

    Two equal containers always encode to identical bytes, and decoding an
    encoding yields an equal container.

    Example:
        >>> class Checkpoint(Container):
        ...     height: Uint64
        ...     base_fee: Dec
        >>> Checkpoint(height=Uint64(1), base_fee=Dec(1)).encode_bytes()
        b'{"height":1,"baseFee":"1.000000000000000000"}'
    """

    def encode_bytes(self) -> bytes:
        """Serialize to the canonical byte encoding."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """Deserialize from the canonical byte encoding."""
        return cls.model_validate_json(data)

    def hash_root(self) -> bytes:
        """SHA-256 digest of the canonical encoding, used as an identifier."""
        return hashlib.sha256(self.encode_bytes()).digest()
