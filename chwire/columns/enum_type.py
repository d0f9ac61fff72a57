"""The Enum8 and Enum16 column types."""

from __future__ import annotations

import numbers
import re
from typing import Any, Mapping

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = ["EnumColumn", "parse_enum"]

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT16_MIN, _INT16_MAX = -(1 << 15), (1 << 15) - 1


def _wrap(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


class EnumColumn(Column):
    """An enumeration stored as an 8- or 16-bit code and read back as its name."""

    scan_type = str

    def __init__(
        self, name: str, ch_type: str, values: Mapping[str, int], bits: int = 8
    ) -> None:
        super().__init__(name, ch_type)
        if bits not in (8, 16):
            raise ValueError(f"unsupported Enum width: {bits}")
        self.bits = bits
        self.values = {ident: _wrap(int(code), bits) for ident, code in values.items()}
        self.names = {code: ident for ident, code in self.values.items()}
        self._first = next(iter(self.values.values()), 0)

    def read(self, decoder: Decoder, is_null: bool) -> str:
        code = decoder.int16() if self.bits == 16 else decoder.int8()
        if code in self.names:
            return self.names[code]
        if is_null:
            return ""
        raise ValueError(f"invalid Enum value: {code}")

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, str):
            if value not in self.values:
                raise ValueError(f"invalid Enum ident: {value}")
            code = self.values[value]
        elif isinstance(value, numbers.Integral) and not isinstance(value, bool):
            code = int(value)
        else:
            raise UnexpectedTypeError(self, value)
        wrapped = _wrap(code, self.bits)
        if self.bits == 16:
            encoder.int16(wrapped)
        else:
            encoder.int8(wrapped)

    def default_value(self) -> int:
        """The code of the first declared value, written in place of a NULL."""
        return self._first


def parse_enum(name: str, ch_type: str) -> EnumColumn:
    """Build an Enum column from a type such as ``Enum8('A'=1,'B'=2)``."""
    if len(ch_type) < 8:
        raise ValueError(f"invalid Enum format: {ch_type}")
    if ch_type.startswith("Enum8"):
        data = ch_type[6:]
        bits = 8
    elif ch_type.startswith("Enum16"):
        data = ch_type[7:]
        bits = 16
    else:
        raise ValueError(f"'{ch_type}' is not Enum type")

    values: dict[str, int] = {}
    for block in data[:-1].split(","):
        parts = block.split("=")
        if len(parts) != 2:
            raise ValueError(f"invalid Enum format: {ch_type}")
        ident = parts[0].strip()
        number = parts[1].strip()
        if not _INTEGER_RE.fullmatch(number):
            raise ValueError(f"invalid Enum value: {ch_type}")
        code = int(number)
        if not _INT16_MIN <= code <= _INT16_MAX:
            raise ValueError(f"invalid Enum value: {ch_type}")
        if len(ident) < 2:
            raise ValueError(f"invalid Enum format: {ch_type}")
        values[ident[1:-1]] = code
    return EnumColumn(name, ch_type, values, bits)