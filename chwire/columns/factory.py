"""Building column objects from ClickHouse type names."""

from __future__ import annotations

import ipaddress
from datetime import datetime, tzinfo
from typing import Callable, Optional

from chwire.columns.base import Column
from chwire.columns.composite import Array, Nullable, Tuple
from chwire.columns.decimal import parse_decimal
from chwire.columns.enum_type import parse_enum
from chwire.columns.network import IPv4, IPv6
from chwire.columns.numeric import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from chwire.columns.temporal import Date, DateTime, DateTime64
from chwire.columns.text import String
from chwire.columns.uuid_type import UUID

__all__ = ["create_column", "nested_type"]

_SIMPLE: dict[str, Callable[[str, str], Column]] = {
    "Int8": Int8,
    "Int16": Int16,
    "Int32": Int32,
    "Int64": Int64,
    "UInt8": UInt8,
    "UInt16": UInt16,
    "UInt32": UInt32,
    "UInt64": UInt64,
    "Float32": Float32,
    "Float64": Float64,
    "String": String,
    "UUID": UUID,
    "IPv4": IPv4,
    "IPv6": IPv6,
}

_ARRAY_SCAN_TYPES = (
    int,
    float,
    str,
    datetime,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    tuple,
)


def create_column(name: str, ch_type: str, timezone: Optional[tzinfo] = None) -> Column:
    """Return the column object for a ClickHouse type name.

    ``timezone`` is used by the date and time columns; None means local time.
    """
    simple = _SIMPLE.get(ch_type)
    if simple is not None:
        return simple(name, ch_type)
    if ch_type == "Date":
        return Date(name, ch_type, timezone)
    if ch_type.startswith("DateTime64"):
        return DateTime64(name, ch_type, timezone)
    if ch_type.startswith("DateTime"):
        return DateTime(name, "DateTime", timezone)
    if ch_type.startswith("Array"):
        return _parse_array(name, ch_type, timezone)
    if ch_type.startswith("Nullable"):
        return _parse_nullable(name, ch_type, timezone)
    if ch_type.startswith(("Enum8", "Enum16")):
        return parse_enum(name, ch_type)
    if ch_type.startswith("Decimal"):
        return parse_decimal(name, ch_type)
    if ch_type.startswith("SimpleAggregateFunction"):
        return create_column(name, nested_type(ch_type, "SimpleAggregateFunction"), timezone)
    if ch_type.startswith("Tuple"):
        return _parse_tuple(name, ch_type, timezone)
    raise ValueError(f"column: unhandled type {ch_type}")


def nested_type(ch_type: str, wrap_type: str) -> str:
    """Return the value type of a wrapper such as ``SimpleAggregateFunction(f, T)``."""
    prefix_len = len(wrap_type) + 1
    if len(ch_type) > prefix_len + 1:
        nested = ch_type[prefix_len:-1].split(",")
        if len(nested) == 2:
            return nested[1].strip()
    raise ValueError(f"column: invalid {wrap_type} type ({ch_type})")


def _parse_array(name: str, ch_type: str, timezone: Optional[tzinfo]) -> Array:
    if len(ch_type) < 11:
        raise ValueError(f"invalid Array column type: {ch_type}")
    inner = ch_type
    depth = 0
    while inner.startswith("Array(") and inner.endswith(")"):
        inner = inner[6:-1]
        depth += 1
    if depth == 0:
        raise ValueError(f"invalid Array column type: {ch_type}")
    try:
        column = create_column(name, inner, timezone)
    except ValueError as exc:
        raise ValueError(f"Array(T): {exc}") from exc
    scan_type = column.scan_type
    if scan_type not in _ARRAY_SCAN_TYPES:
        raise ValueError(f"unsupported Array type '{scan_type.__name__}'")
    return Array(name, ch_type, column, depth)


def _parse_nullable(name: str, ch_type: str, timezone: Optional[tzinfo]) -> Nullable:
    if len(ch_type) < 14:
        raise ValueError(f"invalid Nullable column type: {ch_type}")
    try:
        column = create_column(name, ch_type[9:-1], timezone)
    except ValueError as exc:
        raise ValueError(f"Nullable(T): {exc}") from exc
    return Nullable(name, ch_type, column)


def _split_top_level(text: str) -> list[str]:
    parts = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(text[start:index].strip())
            start = index + 1
    parts.append(text[start:].strip())
    return parts


def _parse_tuple(name: str, ch_type: str, timezone: Optional[tzinfo]) -> Tuple:
    if not (ch_type.startswith("Tuple(") and ch_type.endswith(")")):
        raise ValueError(f"invalid Tuple column type: {ch_type}")
    columns = []
    for position, element_type in enumerate(_split_top_level(ch_type[6:-1]), start=1):
        try:
            columns.append(create_column(f"{name}.{position}", element_type, timezone))
        except ValueError as exc:
            raise ValueError(f"{element_type}: {exc}") from exc
    return Tuple(name, ch_type, columns)