"""The Decimal(P, S) column type."""

from __future__ import annotations

import numbers
import re
from typing import Any

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = ["Decimal", "parse_decimal"]

_MAX_SCALE_FACTOR = 18
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_INT32_MIN, _INT32_MAX = -(1 << 31), (1 << 31) - 1
_INT64_MIN, _INT64_MAX = -(1 << 63), (1 << 63) - 1
_INT128_MIN, _INT128_MAX = -(1 << 127), (1 << 127) - 1


def _bits_for(precision: int) -> int:
    if precision <= 9:
        return 32
    if precision <= 18:
        return 64
    if precision <= 38:
        return 128
    raise ValueError("precision of Decimal exceeds max bound")


class Decimal(Column):
    """A fixed-point number stored as an integer scaled by 10**scale.

    Precision up to 9 uses 32 bits, up to 18 uses 64 bits and up to 38
    uses 128 bits, which are read and written as 16 little-endian bytes.
    Floating-point values are scaled and truncated toward zero.
    """

    def __init__(self, name: str, ch_type: str, precision: int, scale: int) -> None:
        super().__init__(name, ch_type)
        if precision < 1:
            raise ValueError("wrong precision of Decimal type")
        if scale < 0 or scale > precision:
            raise ValueError("wrong scale of Decimal type")
        self.bits = _bits_for(precision)
        self.precision = precision
        self.scale = scale
        if self.bits == 128:
            self.scan_type = bytes
            self.default = bytes(16)
        else:
            self.scan_type = int
            self.default = 0

    def read(self, decoder: Decoder, is_null: bool) -> Any:
        if self.bits == 32:
            return decoder.int32()
        if self.bits == 64:
            return decoder.int64()
        return decoder.fixed(16)

    def _scaled(self, value: float) -> int:
        if self.scale > _MAX_SCALE_FACTOR:
            raise ValueError(
                f"cannot scale a floating-point value by 10**{self.scale}"
            )
        return int(float(value) * float(10**self.scale))

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, bool):
            raise UnexpectedTypeError(self, value)
        if isinstance(value, numbers.Integral):
            number = int(value)
        elif isinstance(value, numbers.Real):
            number = self._scaled(float(value))
        elif self.bits == 128 and isinstance(value, (bytes, bytearray, memoryview)):
            raw = bytes(value)
            if len(raw) != 16:
                raise ValueError("expected 16 bytes")
            encoder.write(raw)
            return
        else:
            raise UnexpectedTypeError(self, value)

        if self.bits == 32:
            if not _INT32_MIN <= number <= _INT32_MAX:
                raise OverflowError(
                    f"overflow when narrowing {number} to a 32-bit decimal"
                )
            encoder.int32(number)
        elif self.bits == 64:
            if not _INT64_MIN <= number <= _INT64_MAX:
                raise OverflowError(
                    f"overflow when narrowing {number} to a 64-bit decimal"
                )
            encoder.int64(number)
        else:
            if not _INT128_MIN <= number <= _INT128_MAX:
                raise OverflowError(
                    f"overflow when narrowing {number} to a 128-bit decimal"
                )
            encoder.write(number.to_bytes(16, "little", signed=True))


def _parse_int(text: str, ch_type: str) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise ValueError(f"'{ch_type}' is not Decimal type: invalid number {text!r}")
    return int(text)


def parse_decimal(name: str, ch_type: str) -> Decimal:
    """Build a Decimal column from a type such as ``Decimal(18, 5)``."""
    if (
        len(ch_type) < 12
        or not ch_type.startswith("Decimal")
        or ch_type[7] != "("
        or ch_type[-1] != ")"
    ):
        raise ValueError(f"invalid Decimal format: '{ch_type}'")
    params = ch_type[8:-1].split(",")
    if len(params) != 2:
        raise ValueError(f"invalid Decimal format: '{ch_type}'")
    precision = _parse_int(params[0].strip(), ch_type)
    scale = _parse_int(params[1].strip(), ch_type)
    return Decimal(name, ch_type, precision, scale)