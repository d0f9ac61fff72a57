"""The String column type."""

from __future__ import annotations

from typing import Any

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = ["String"]


class String(Column):
    """A length-prefixed byte string, read back as text."""

    scan_type = str
    default = ""

    def read(self, decoder: Decoder, is_null: bool) -> str:
        return decoder.string()

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, (str, bytes, bytearray, memoryview)):
            encoder.string(value if isinstance(value, str) else bytes(value))
            return
        raise UnexpectedTypeError(self, value)