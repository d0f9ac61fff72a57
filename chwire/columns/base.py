"""Wire encoder and decoder, and the base class shared by all column types."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from typing import Any, BinaryIO

__all__ = ["Encoder", "Decoder", "UnexpectedTypeError", "Column"]

_MAX_UVARINT = (1 << 64) - 1


class Encoder:
    """Writes native-format values to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def _pack(self, fmt: str, value: Any) -> None:
        try:
            data = struct.pack(fmt, value)
        except struct.error as exc:
            raise OverflowError(f"{value!r} does not fit the wire type: {exc}") from exc
        self.stream.write(data)

    def write(self, data: bytes) -> int:
        """Write raw bytes and return how many were written."""
        self.stream.write(data)
        return len(data)

    def uvarint(self, value: int) -> None:
        """Write an unsigned LEB128 variable-length integer."""
        if value < 0 or value > _MAX_UVARINT:
            raise ValueError(f"uvarint out of range: {value}")
        out = bytearray()
        while value >= 0x80:
            out.append((value & 0x7F) | 0x80)
            value >>= 7
        out.append(value)
        self.stream.write(bytes(out))

    def bool(self, value: bool) -> None:
        self.stream.write(b"\x01" if value else b"\x00")

    def int8(self, value: int) -> None:
        self._pack("<b", value)

    def int16(self, value: int) -> None:
        self._pack("<h", value)

    def int32(self, value: int) -> None:
        self._pack("<i", value)

    def int64(self, value: int) -> None:
        self._pack("<q", value)

    def uint8(self, value: int) -> None:
        self._pack("<B", value)

    def uint16(self, value: int) -> None:
        self._pack("<H", value)

    def uint32(self, value: int) -> None:
        self._pack("<I", value)

    def uint64(self, value: int) -> None:
        self._pack("<Q", value)

    def float32(self, value: float) -> None:
        self._pack("<f", value)

    def float64(self, value: float) -> None:
        self._pack("<d", value)

    def string(self, value: str | bytes) -> None:
        """Write a length-prefixed string; text is encoded as UTF-8."""
        if isinstance(value, str):
            data = value.encode("utf-8", "surrogateescape")
        else:
            data = bytes(value)
        self.uvarint(len(data))
        self.stream.write(data)


class Decoder:
    """Reads native-format values from a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def fixed(self, size: int) -> bytes:
        """Read exactly ``size`` bytes, raising EOFError if the stream ends first."""
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self.stream.read(remaining)
            if not chunk:
                raise EOFError(f"expected {size} bytes, got {size - remaining}")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _unpack(self, fmt: str) -> Any:
        return struct.unpack(fmt, self.fixed(struct.calcsize(fmt)))[0]

    def uvarint(self) -> int:
        """Read an unsigned LEB128 variable-length integer."""
        result = 0
        for index in range(10):
            byte = self.fixed(1)[0]
            if byte < 0x80:
                if index == 9 and byte > 1:
                    break
                return result | (byte << (7 * index))
            result |= (byte & 0x7F) << (7 * index)
        raise ValueError("uvarint overflows a 64-bit integer")

    def bool(self) -> bool:
        return self.fixed(1)[0] != 0

    def int8(self) -> int:
        return self._unpack("<b")

    def int16(self) -> int:
        return self._unpack("<h")

    def int32(self) -> int:
        return self._unpack("<i")

    def int64(self) -> int:
        return self._unpack("<q")

    def uint8(self) -> int:
        return self._unpack("<B")

    def uint16(self) -> int:
        return self._unpack("<H")

    def uint32(self) -> int:
        return self._unpack("<I")

    def uint64(self) -> int:
        return self._unpack("<Q")

    def float32(self) -> float:
        return self._unpack("<f")

    def float64(self) -> float:
        return self._unpack("<d")

    def string(self) -> str:
        """Read a length-prefixed UTF-8 string."""
        length = self.uvarint()
        return self.fixed(length).decode("utf-8", "surrogateescape")


class UnexpectedTypeError(TypeError):
    """A value of a type the column cannot encode was given to it."""

    def __init__(self, column: "Column", value: Any) -> None:
        self.column = column
        self.value = value
        super().__init__(f"{column}: unexpected type {type(value).__name__}")


class Column(ABC):
    """A named column of one ClickHouse type."""

    scan_type: type = object
    default: Any = None
    depth = 0

    def __init__(self, name: str, ch_type: str) -> None:
        self.name = name
        self.ch_type = ch_type

    @abstractmethod
    def read(self, decoder: Decoder, is_null: bool) -> Any:
        """Read one value of this column."""

    @abstractmethod
    def write(self, encoder: Encoder, value: Any) -> None:
        """Write one value of this column."""

    def default_value(self) -> Any:
        """Value written in place of a NULL."""
        return self.default

    def __str__(self) -> str:
        return f"{self.name} ({self.ch_type})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.ch_type!r})"