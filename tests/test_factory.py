import io
import ipaddress
from datetime import datetime, timezone

import pytest

from chwire.columns.base import Decoder, Encoder, UnexpectedTypeError
from chwire.columns.composite import Array, Nullable, Tuple
from chwire.columns.decimal import Decimal
from chwire.columns.enum_type import EnumColumn
from chwire.columns.factory import create_column, nested_type
from chwire.columns.temporal import DateTime


def _pipe():
    buf = io.BytesIO()
    return buf, Encoder(buf)


def _reader(buf):
    return Decoder(io.BytesIO(buf.getvalue()))


def test_int8_roundtrip_via_factory():
    buf, encoder = _pipe()
    column = create_column("column_name", "Int8", None)
    for value in range(-128, 128):
        column.write(encoder, value)
    decoder = _reader(buf)
    assert [column.read(decoder, False) for _ in range(256)] == list(range(-128, 128))
    assert column.name == "column_name"
    assert column.ch_type == "Int8"
    with pytest.raises(UnexpectedTypeError) as info:
        column.write(encoder, "x")
    assert info.value.value == "x"


@pytest.mark.parametrize(
    "ch_type",
    ["Int16", "Int32", "Int64", "UInt8", "UInt16", "UInt32", "UInt64", "Float32", "Float64", "String", "UUID"],
)
def test_simple_types_keep_name_and_type(ch_type):
    column = create_column("column_name", ch_type, None)
    assert column.name == "column_name"
    assert column.ch_type == ch_type


def test_uuid_roundtrip_via_factory():
    uuids = [
        "00000000-0000-0000-0000-000000000000",
        "6e6a7955-3237-3461-3036-663239386432",
        "4c436370-6130-6461-6437-336534326163",
        "47474674-3238-3066-3236-373437666435",
        "0492351a-3cb1-4cb5-855f-e0508145a54c",
        "798c4344-de6c-4c02-95ba-fea4f7d5fafd",
    ]
    buf, encoder = _pipe()
    column = create_column("column_name", "UUID", None)
    for value in uuids:
        column.write(encoder, value)
    decoder = _reader(buf)
    assert [column.read(decoder, False) for _ in uuids] == uuids


def test_ip_columns_via_factory():
    buf, encoder = _pipe()
    v4 = create_column("column_name", "IPv4", None)
    v6 = create_column("column_name", "IPv6", None)
    v4.write(encoder, "127.0.0.1")
    v6.write(encoder, "2001:0db8:0000:0000:0000:ff00:0042:8329")
    decoder = _reader(buf)
    assert v4.read(decoder, False) == ipaddress.ip_address("127.0.0.1")
    assert v6.read(decoder, False) == ipaddress.ip_address("2001:db8::ff00:42:8329")
    for column in (v4, v6):
        with pytest.raises(UnexpectedTypeError) as info:
            column.write(encoder, "")
        assert info.value.value == ""


def test_datetime_with_timezone_parameter():
    column = create_column("column_name", 'DateTime("UTC")', None)
    assert isinstance(column, DateTime)
    assert column.ch_type == "DateTime"
    assert column.name == "column_name"


def test_date_roundtrip_via_factory():
    buf, encoder = _pipe()
    column = create_column("column_name", "Date", timezone.utc)
    column.write(encoder, "2020-01-02")
    assert column.read(_reader(buf), False) == datetime(2020, 1, 2, tzinfo=timezone.utc)


def test_datetime64_roundtrip_via_factory():
    buf, encoder = _pipe()
    column = create_column("column_name", "DateTime64(6)", timezone.utc)
    moment = datetime(2021, 3, 4, 5, 6, 7, 123450, tzinfo=timezone.utc)
    column.write(encoder, moment)
    assert column.read(_reader(buf), False) == moment
    assert column.ch_type == "DateTime64(6)"


@pytest.mark.parametrize(
    "ch_type,expected",
    [
        ("SimpleAggregateFunction(anyLast, UInt8)", "UInt8"),
        ("SimpleAggregateFunction(anyLast, Nullable(IPv4))", "Nullable(IPv4)"),
        ("SimpleAggregateFunction(max, Nullable(DateTime))", "Nullable(DateTime)"),
    ],
)
def test_simple_aggregate_function(ch_type, expected):
    column = create_column("column_name", ch_type, None)
    assert column.name == "column_name"
    assert column.ch_type == expected


def test_nested_type_rejects_bad_wrapper():
    with pytest.raises(ValueError):
        nested_type("SimpleAggregateFunction(x)", "SimpleAggregateFunction")
    assert nested_type("SimpleAggregateFunction(sum, UInt64)", "SimpleAggregateFunction") == "UInt64"


def test_decimal64_via_factory():
    buf, encoder = _pipe()
    column = create_column("column_name", "Decimal(18,5)", None)
    assert isinstance(column, Decimal)
    assert column.precision == 18
    assert column.scale == 5
    column.write(encoder, 1123.12345)
    assert column.read(_reader(buf), False) == 112312345
    assert column.ch_type == "Decimal(18,5)"
    assert column.scan_type is int


def test_nullable_decimal64():
    buf, encoder = _pipe()
    column = create_column("column_name", "Nullable(Decimal(18,5))", None)
    assert isinstance(column, Nullable)
    assert column.column.precision == 18
    assert column.column.scale == 5
    column.write_null(encoder, encoder, 1123.12345)
    column.write_null(encoder, encoder, None)
    decoder = _reader(buf)
    assert column.read_null(decoder, 1) == [112312345]
    assert column.read_null(decoder, 1) == [None]
    assert column.ch_type == "Nullable(Decimal(18,5))"
    assert column.scan_type is int


def test_nullable_enum8():
    buf, encoder = _pipe()
    column = create_column("column_name", "Nullable(Enum8('A'=1,'B'=2,'C'=3))", None)
    assert isinstance(column, Nullable)
    assert isinstance(column.column, EnumColumn)
    assert column.column.ch_type == "Enum8('A'=1,'B'=2,'C'=3)"
    column.write_null(encoder, encoder, "B")
    column.write_null(encoder, encoder, None)
    encoder.write(b"\x01")
    encoder.int8(0)
    decoder = _reader(buf)
    assert column.read_null(decoder, 1) == ["B"]
    assert column.read_null(decoder, 1) == [None]
    assert column.read_null(decoder, 1) == [None]
    assert column.scan_type is str


def test_array_depth_and_read():
    column = create_column("a", "Array(Array(Int8))", None)
    assert isinstance(column, Array)
    assert column.depth == 2
    assert column.ch_type == "Array(Array(Int8))"
    assert column.column.ch_type == "Int8"

    flat = create_column("a", "Array(Int32)", None)
    buf, encoder = _pipe()
    encoder.uint64(2)
    encoder.uint64(3)
    for value in (1, 2, 3):
        encoder.int32(value)
    assert flat.read_array(_reader(buf), 2) == [[1, 2], [3]]


def test_array_of_nullable():
    column = create_column("a", "Array(Nullable(Int8))", None)
    assert column.nullable
    buf, encoder = _pipe()
    encoder.uint64(2)
    encoder.write(b"\x00\x01")
    encoder.int8(5)
    encoder.int8(0)
    assert column.read_array(_reader(buf), 1) == [[5, None]]


@pytest.mark.parametrize("ch_type", ["Array(X)", "Array(Decimal(20,2))", "Array(Bogus)"])
def test_array_errors(ch_type):
    with pytest.raises(ValueError):
        create_column("a", ch_type, None)


def test_nullable_too_short():
    with pytest.raises(ValueError):
        create_column("n", "Nullable(X)", None)


def test_tuple_parse_and_read():
    column = create_column("t", "Tuple(Int8, String)", None)
    assert isinstance(column, Tuple)
    assert [c.name for c in column.columns] == ["t.1", "t.2"]
    assert [c.ch_type for c in column.columns] == ["Int8", "String"]
    buf, encoder = _pipe()
    encoder.int8(1)
    encoder.int8(2)
    encoder.string("a")
    encoder.string("b")
    assert column.read_tuple(_reader(buf), 2) == [(1, "a"), (2, "b")]


def test_nested_tuple_types():
    column = create_column("t", "Tuple(Array(Int8), Nullable(String))", None)
    assert [c.ch_type for c in column.columns] == ["Array(Int8)", "Nullable(String)"]


def test_unhandled_type():
    with pytest.raises(ValueError, match="unhandled type"):
        create_column("c", "Foo", None)