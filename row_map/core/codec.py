"""Payload codec for serialize-flagged columns.

The default codec stores values as JSON text and decodes them back into the
field's declared type using Pydantic's validators.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

import pydantic_core
from pydantic import TypeAdapter, ValidationError


class CodecError(ValueError):
    """Raised by a codec when a value cannot be encoded or decoded."""


@runtime_checkable
class Codec(Protocol):
    """Serialization protocol for column payloads."""

    def encode(self, value: Any) -> str:
        """Encode *value* into its stored text representation."""
        ...

    def decode(self, data: Any, annotation: Any) -> Any:
        """Decode stored *data* (text or a driver-parsed value) into *annotation*."""
        ...


@lru_cache(maxsize=256)
def _adapter(annotation: Any) -> TypeAdapter[Any]:
    return TypeAdapter(annotation)


class JsonCodec:
    """JSON codec backed by ``pydantic_core``."""

    def encode(self, value: Any) -> str:
        try:
            return pydantic_core.to_json(value).decode("utf-8")
        except pydantic_core.PydanticSerializationError as e:
            raise CodecError(str(e)) from e

    def decode(self, data: Any, annotation: Any = Any) -> Any:
        """Decode JSON text, or validate a payload the driver already parsed."""
        if isinstance(data, memoryview):
            data = data.tobytes()
        try:
            adapter = _adapter(annotation)
        except TypeError:
            # Unhashable or unsupported annotations decode as plain JSON
            adapter = _adapter(Any)
        try:
            if isinstance(data, (str, bytes, bytearray)):
                return adapter.validate_json(data)
            # json/jsonb columns arrive as dicts, lists or scalars
            return adapter.validate_python(data)
        except ValidationError as e:
            raise CodecError(str(e)) from e
