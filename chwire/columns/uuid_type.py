"""The UUID column type."""

from __future__ import annotations

import string
from typing import Any

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = ["UUID_LEN", "NULL_UUID", "InvalidUUIDFormatError", "UUID", "uuid_to_bytes"]

UUID_LEN = 16
NULL_UUID = "00000000-0000-0000-0000-000000000000"

_HEX_DIGITS = frozenset(string.hexdigits)
_DASHES = (8, 13, 18, 23)


class InvalidUUIDFormatError(ValueError):
    """The text is not a UUID in canonical 8-4-4-4-12 form."""

    def __init__(self, message: str = "invalid UUID format") -> None:
        super().__init__(message)


def _swap(raw: bytes) -> bytes:
    """Reverse each 8-byte half, the order ClickHouse stores UUIDs in."""
    return raw[:8][::-1] + raw[8:][::-1]


def uuid_to_bytes(text: str) -> bytes:
    """Return the 16 bytes of a canonical UUID; empty text means the null UUID."""
    if not text:
        text = NULL_UUID
    elif len(text) != 36:
        raise InvalidUUIDFormatError()
    if any(text[index] != "-" for index in _DASHES):
        raise InvalidUUIDFormatError()
    digits = text.replace("-", "")
    if len(digits) != 32 or not set(digits) <= _HEX_DIGITS:
        raise InvalidUUIDFormatError()
    return bytes.fromhex(digits)


class UUID(Column):
    """A UUID stored as sixteen bytes, each half in reverse order."""

    scan_type = str
    default = ""

    def read(self, decoder: Decoder, is_null: bool) -> str:
        digits = _swap(decoder.fixed(UUID_LEN)).hex()
        return "-".join(
            (digits[:8], digits[8:12], digits[12:16], digits[16:20], digits[20:])
        )

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, str):
            raw = uuid_to_bytes(value)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
            if len(raw) != UUID_LEN:
                raise ValueError(
                    f"invalid raw UUID length (expected {UUID_LEN}, got {len(raw)})"
                )
        else:
            raise UnexpectedTypeError(self, value)
        encoder.write(_swap(raw))