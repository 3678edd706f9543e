"""
Value (de)serialization for the host store's string records.

Values are stored as JSON text produced by orjson. Decoding cannot tell a
serialized structure from a plain string that happens to be valid JSON, so
it tries to parse and falls back to the raw text: "123" written directly to
the store reads back as the integer 123.
"""

from __future__ import annotations

from typing import Any

import orjson

from quotacache.exceptions import SerializationError


class ValueCodec:
    """Encodes values to store strings and back.

    Args:
        structured: Whether JSON serialization is available. When disabled,
            only str values can be stored and they are written verbatim.
    """

    def __init__(self, structured: bool = True) -> None:
        self.structured = structured

    def encode(self, value: Any) -> str:
        """Serialize a value for the host store.

        Raises:
            SerializationError: If the value cannot be represented, including
                self-referencing containers.
        """
        if not self.structured:
            if isinstance(value, str):
                return value
            raise SerializationError(
                "Structured serialization unavailable for non-string value",
                context={"value_type": type(value).__name__},
            )

        try:
            return orjson.dumps(value).decode("utf-8")
        except orjson.JSONEncodeError as e:
            raise SerializationError(
                f"Could not serialize value: {e}",
                context={"value_type": type(value).__name__},
            ) from e

    def decode(self, raw: str) -> Any:
        """Deserialize a stored string, returning it verbatim if it is not JSON."""
        if not self.structured:
            return raw
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:
            return raw
