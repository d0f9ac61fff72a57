"""Fixed-width integer and floating-point column types."""

from __future__ import annotations

import math
import numbers
from typing import Any

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = [
    "IntegerColumn",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "FloatColumn",
    "Float32",
    "Float64",
]

_RAW_TYPES = (bytes, bytearray, memoryview)


class IntegerColumn(Column):
    """A little-endian integer of fixed width.

    Values that do not fit are wrapped to the column's width, as a
    narrowing conversion would.
    """

    bits = 64
    signed = True
    accepts_bool = False
    accepts_raw = False
    scan_type = int
    default = 0

    @property
    def _size(self) -> int:
        return self.bits // 8

    def read(self, decoder: Decoder, is_null: bool) -> int:
        return int.from_bytes(decoder.fixed(self._size), "little", signed=self.signed)

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, bool):
            if not self.accepts_bool:
                raise UnexpectedTypeError(self, value)
            number = int(value)
        elif isinstance(value, numbers.Integral):
            number = int(value)
        elif self.accepts_raw and isinstance(value, _RAW_TYPES):
            encoder.write(bytes(value))
            return
        else:
            raise UnexpectedTypeError(self, value)
        mask = (1 << self.bits) - 1
        encoder.write((number & mask).to_bytes(self._size, "little"))


class Int8(IntegerColumn):
    bits = 8
    accepts_bool = True


class Int16(IntegerColumn):
    bits = 16


class Int32(IntegerColumn):
    bits = 32


class Int64(IntegerColumn):
    bits = 64
    accepts_raw = True


class UInt8(IntegerColumn):
    bits = 8
    signed = False
    accepts_bool = True


class UInt16(IntegerColumn):
    bits = 16
    signed = False


class UInt32(IntegerColumn):
    bits = 32
    signed = False


class UInt64(IntegerColumn):
    bits = 64
    signed = False
    accepts_raw = True


class FloatColumn(Column):
    """An IEEE 754 floating-point number; integers are not accepted."""

    bits = 64
    scan_type = float
    default = 0.0

    def read(self, decoder: Decoder, is_null: bool) -> float:
        if self.bits == 32:
            return decoder.float32()
        return decoder.float64()

    def write(self, encoder: Encoder, value: Any) -> None:
        if not isinstance(value, numbers.Real) or isinstance(value, numbers.Integral):
            raise UnexpectedTypeError(self, value)
        number = float(value)
        if self.bits == 64:
            encoder.float64(number)
            return
        try:
            encoder.float32(number)
        except OverflowError:
            encoder.float32(math.copysign(math.inf, number))


class Float32(FloatColumn):
    bits = 32


class Float64(FloatColumn):
    bits = 64