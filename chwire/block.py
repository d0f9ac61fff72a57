"""Data blocks: the column-oriented unit of rows sent and received."""

from __future__ import annotations

import io
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Sequence

from chwire.columns.base import Column, Decoder, Encoder
from chwire.columns.composite import Array, Nullable, Tuple
from chwire.columns.factory import create_column
from chwire.info import ServerInfo

__all__ = ["Block"]


@dataclass
class _BlockInfo:
    num1: int = 0
    is_overflows: bool = False
    num2: int = 0
    bucket_num: int = 0
    num3: int = 0

    def reset(self) -> None:
        self.num1 = 0
        self.is_overflows = False
        self.num2 = 0
        self.bucket_num = 0
        self.num3 = 0

    def read(self, decoder: Decoder) -> None:
        self.num1 = decoder.uvarint()
        self.is_overflows = decoder.bool()
        self.num2 = decoder.uvarint()
        self.bucket_num = decoder.int32()
        self.num3 = decoder.uvarint()

    def write(self, encoder: Encoder) -> None:
        encoder.uvarint(1)
        encoder.bool(self.is_overflows)
        encoder.uvarint(2)
        if self.bucket_num == 0:
            self.bucket_num = -1
        encoder.int32(self.bucket_num)
        encoder.uvarint(0)


class _Buffer:
    """Per-column staging: null flags (or offsets) and the column data."""

    def __init__(self) -> None:
        self._offset_stream = io.BytesIO()
        self._column_stream = io.BytesIO()
        self.offset = Encoder(self._offset_stream)
        self.column = Encoder(self._column_stream)

    def write_to(self, encoder: Encoder) -> int:
        size = 0
        for stream in (self._offset_stream, self._column_stream):
            size += encoder.write(stream.getvalue())
            stream.seek(0)
            stream.truncate()
        return size

    def reset(self) -> None:
        for stream in (self._offset_stream, self._column_stream):
            stream.seek(0)
            stream.truncate()


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


class Block:
    """A block of rows, stored column by column."""

    def __init__(self, columns: Iterable[Column] = ()) -> None:
        self.columns: list[Column] = list(columns)
        self.values: list[list[Any]] = []
        self.num_rows = 0
        self.num_columns = len(self.columns)
        self.info = _BlockInfo()
        self._offsets: list[list[list[int]]] = []
        self._buffers: list[_Buffer] = []

    def copy(self) -> "Block":
        """Return an empty block with the same columns."""
        block = Block(self.columns)
        block.num_columns = self.num_columns
        block.info = replace(self.info)
        return block

    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def read(self, server_info: ServerInfo, decoder: Decoder) -> None:
        """Read a block sent by the server, replacing the values held."""
        if server_info.revision > 0:
            self.info.read(decoder)
        self.num_columns = decoder.uvarint()
        self.num_rows = decoder.uvarint()
        rows = self.num_rows
        self.values = []
        for _ in range(self.num_columns):
            column_name = decoder.string()
            column_type = decoder.string()
            column = create_column(column_name, column_type, server_info.timezone)
            self.columns.append(column)
            if isinstance(column, Array):
                values = column.read_array(decoder, rows)
            elif isinstance(column, Nullable):
                values = column.read_null(decoder, rows)
            elif isinstance(column, Tuple):
                values = column.read_tuple(decoder, rows)
            else:
                values = [column.read(decoder, False) for _ in range(rows)]
            self.values.append(values)

    def append_row(self, args: Sequence[Any]) -> None:
        """Encode one row of values, one per column, into the staging buffers."""
        if len(self.columns) != len(args):
            raise ValueError(
                f"block: expected {len(self.columns)} arguments "
                f"(columns: {', '.join(self.column_names())}), got {len(args)}"
            )
        self.reserve()
        self.num_rows += 1
        for num, (column, value) in enumerate(zip(self.columns, args)):
            buffer = self._buffers[num]
            if isinstance(column, Array):
                if not _is_sequence(value):
                    raise TypeError(f"unsupported Array(T) type [{type(value).__name__}]")
                self._write_array(column, value, num, 1)
            elif isinstance(column, Nullable):
                column.write_null(buffer.offset, buffer.column, value)
            else:
                column.write(buffer.column, value)

    def _write_array(self, column: Column, value: Any, num: int, level: int) -> None:
        buffer = self._buffers[num]
        if level > column.depth:
            if isinstance(column, Array) and "Nullable" in column.ch_type:
                column.write_null(buffer.offset, buffer.column, value)
            else:
                column.write(buffer.column, value)
            return
        if not _is_sequence(value):
            column.write(buffer.column, value)
            return
        levels = self._offsets[num]
        if len(levels) < level:
            levels.append([len(value)])
        else:
            current = levels[level - 1]
            current.append(current[-1] + len(value))
        for item in value:
            self._write_array(column, item, num, level + 1)

    def reserve(self) -> None:
        """Create the staging buffers if they do not exist yet."""
        if not self._buffers:
            self._buffers = [_Buffer() for _ in self.columns]
            self._offsets = [[] for _ in self.columns]

    def reset(self) -> None:
        """Drop all columns, values and staged data."""
        self.num_rows = 0
        self.num_columns = 0
        self.values = []
        self.columns = []
        self.info.reset()
        for buffer in self._buffers:
            buffer.reset()
        self._offsets = []
        self._buffers = []

    def write(self, server_info: ServerInfo, encoder: Encoder) -> None:
        """Send the staged rows; afterwards the block holds no rows."""
        if server_info.revision > 0:
            self.info.write(encoder)
        encoder.uvarint(self.num_columns)
        encoder.uvarint(self.num_rows)
        try:
            staged = len(self._buffers) == len(self.columns)
            for index, column in enumerate(self.columns):
                encoder.string(column.name)
                encoder.string(column.ch_type)
                if staged:
                    for level in self._offsets[index]:
                        for offset in level:
                            encoder.uint64(offset)
                    self._buffers[index].write_to(encoder)
        finally:
            self.num_rows = 0
            self._offsets = [[] for _ in self._offsets]

    def __repr__(self) -> str:
        return f"Block(columns={self.column_names()!r}, rows={self.num_rows})"


def _server(revision: int = 0, zone: Optional[Any] = None) -> ServerInfo:
    return ServerInfo(revision=revision, timezone=zone)