"""Nullable, Array and Tuple column types, which wrap other columns."""

from __future__ import annotations

from typing import Any, Iterator, Sequence

from chwire.columns.base import Column, Decoder, Encoder

__all__ = ["Nullable", "Array", "Tuple"]


class Nullable(Column):
    """A column whose values may be NULL, with a separate null-flag stream."""

    def __init__(self, name: str, ch_type: str, column: Column) -> None:
        super().__init__(name, ch_type)
        self.column = column

    @property
    def scan_type(self) -> type:  # type: ignore[override]
        return self.column.scan_type

    def read(self, decoder: Decoder, is_null: bool) -> Any:
        return self.column.read(decoder, is_null)

    def write(self, encoder: Encoder, value: Any) -> None:
        """Write nothing; values go through :meth:`write_null`."""

    def read_null(self, decoder: Decoder, rows: int) -> list[Any]:
        """Read ``rows`` null flags followed by ``rows`` values; NULLs become None."""
        flags = decoder.fixed(rows)
        values = []
        for flag in flags:
            value = self.column.read(decoder, flag != 0)
            values.append(None if flag else value)
        return values

    def write_null(self, nulls: Encoder, encoder: Encoder, value: Any) -> None:
        """Write the null flag to ``nulls`` and the value (or a default) to ``encoder``."""
        if value is None:
            nulls.write(b"\x01")
            self.column.write(encoder, self.column.default_value())
            return
        nulls.write(b"\x00")
        self.column.write(encoder, value)


class Array(Column):
    """A possibly nested array of values of one inner column type."""

    scan_type = list

    def __init__(self, name: str, ch_type: str, column: Column, depth: int) -> None:
        super().__init__(name, ch_type)
        if depth < 1:
            raise ValueError(f"invalid Array depth: {depth}")
        self.column = column
        self.depth = depth
        self.nullable = column.ch_type.startswith("Nullable")

    def default_value(self) -> list[Any]:
        return []

    def read(self, decoder: Decoder, is_null: bool) -> Any:
        raise TypeError("do not use read method for Array(T) column")

    def write(self, encoder: Encoder, value: Any) -> None:
        self.column.write(encoder, value)

    def write_null(self, nulls: Encoder, encoder: Encoder, value: Any) -> None:
        """Write one possibly-NULL element of an array of a Nullable type."""
        if not self.nullable:
            raise ValueError("write null to not nullable array")
        if not isinstance(self.column, Nullable):
            raise ValueError("cannot convert to nullable type")
        self.column.write_null(nulls, encoder, value)

    def read_array(self, decoder: Decoder, rows: int) -> list[Any]:
        """Read ``rows`` arrays: all offset levels first, then the flat values."""
        offsets: list[list[int]] = []
        count = rows
        for _ in range(self.depth):
            level = [decoder.uint64() for _ in range(count)]
            offsets.append(level)
            count = level[-1] if level else 0
        items = self._leaf_values(decoder, count)
        return [self._build(items, offsets, index, 0) for index in range(rows)]

    def _leaf_values(self, decoder: Decoder, count: int) -> Iterator[Any]:
        if isinstance(self.column, Nullable):
            return iter(self.column.read_null(decoder, count))
        if isinstance(self.column, Tuple):
            return iter(self.column.read_tuple(decoder, count))
        return (self.column.read(decoder, self.nullable) for _ in range(count))

    def _build(
        self, items: Iterator[Any], offsets: list[list[int]], index: int, level: int
    ) -> list[Any]:
        end = offsets[level][index]
        start = offsets[level][index - 1] if index > 0 else 0
        result = []
        for position in range(start, end):
            if level == self.depth - 1:
                try:
                    result.append(next(items))
                except StopIteration:
                    raise ValueError("not enough rows to build the array") from None
            else:
                result.append(self._build(items, offsets, position, level + 1))
        return result


class Tuple(Column):
    """A tuple of columns, stored column by column."""

    scan_type = tuple

    def __init__(self, name: str, ch_type: str, columns: Sequence[Column]) -> None:
        super().__init__(name, ch_type)
        self.columns = list(columns)

    def default_value(self) -> tuple:
        return ()

    def read(self, decoder: Decoder, is_null: bool) -> Any:
        raise TypeError("do not use read method for Tuple(T) column")

    def write(self, encoder: Encoder, value: Any) -> None:
        raise TypeError(f"unsupported Tuple(T) type [{type(value).__name__}]")

    def read_tuple(self, decoder: Decoder, rows: int) -> list[tuple]:
        """Read ``rows`` tuples, each element column read in turn."""
        if not self.columns:
            return [() for _ in range(rows)]
        per_column = []
        for column in self.columns:
            if isinstance(column, Array):
                per_column.append(column.read_array(decoder, rows))
            elif isinstance(column, Nullable):
                per_column.append(column.read_null(decoder, rows))
            elif isinstance(column, Tuple):
                per_column.append(column.read_tuple(decoder, rows))
            else:
                per_column.append([column.read(decoder, False) for _ in range(rows)])
        return [tuple(row) for row in zip(*per_column)]