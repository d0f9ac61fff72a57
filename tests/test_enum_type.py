import io

import pytest

from chwire.columns.base import Decoder, Encoder, UnexpectedTypeError
from chwire.columns.enum_type import EnumColumn, parse_enum


def _pair():
    buf = io.BytesIO()
    return buf, Encoder(buf)


def _decoder(buf):
    return Decoder(io.BytesIO(buf.getvalue()))


def test_enum8_roundtrip_by_name_and_code():
    column = parse_enum("column_name", "Enum8('A'=1,'B'=2,'C'=3)")
    buf, enc = _pair()
    column.write(enc, "B")
    column.write(enc, 3)
    dec = _decoder(buf)
    assert column.read(dec, False) == "B"
    assert column.read(dec, False) == "C"
    assert buf.getvalue() == b"\x02\x03"


def test_enum8_metadata():
    column = parse_enum("column_name", "Enum8('A'=1,'B'=2,'C'=3)")
    assert column.name == "column_name"
    assert column.ch_type == "Enum8('A'=1,'B'=2,'C'=3)"
    assert column.scan_type is str
    assert column.bits == 8


def test_enum16_roundtrip_uses_two_bytes():
    column = parse_enum("column_name", "Enum16('A'=1,'B'=2,'C'=3)")
    buf, enc = _pair()
    column.write(enc, "B")
    column.write(enc, 3)
    assert buf.getvalue() == b"\x02\x00\x03\x00"
    dec = _decoder(buf)
    assert column.read(dec, False) == "B"
    assert column.read(dec, False) == "C"
    assert column.ch_type == "Enum16('A'=1,'B'=2,'C'=3)"


@pytest.mark.parametrize("value", [1.5, None, True, [1]])
def test_unexpected_type(value):
    column = parse_enum("column_name", "Enum8('A'=1,'B'=2,'C'=3)")
    _, enc = _pair()
    with pytest.raises(UnexpectedTypeError) as info:
        column.write(enc, value)
    assert info.value.value == value


def test_unknown_ident():
    column = parse_enum("e", "Enum8('A'=1)")
    _, enc = _pair()
    with pytest.raises(ValueError, match="invalid Enum ident"):
        column.write(enc, "Z")


def test_read_unknown_code():
    column = parse_enum("e", "Enum8('A'=1,'B'=2)")
    with pytest.raises(ValueError, match="invalid Enum value"):
        column.read(Decoder(io.BytesIO(b"\x07")), False)


def test_read_unknown_code_when_null():
    column = parse_enum("e", "Enum8('A'=1,'B'=2)")
    assert column.read(Decoder(io.BytesIO(b"\x00")), True) == ""


def test_default_value_is_first_code():
    assert parse_enum("e", "Enum8('A'=5,'B'=2)").default_value() == 5
    assert parse_enum("e", "Enum16('x'=-300,'y'=2)").default_value() == -300


def test_spaces_and_negative_values():
    column = parse_enum("e", "Enum8('a' = -1, 'b' = 2)")
    assert column.values == {"a": -1, "b": 2}
    assert column.read(Decoder(io.BytesIO(b"\xff")), False) == "a"


def test_enum8_value_wraps_to_eight_bits():
    column = parse_enum("e", "Enum8('A'=200)")
    assert column.values == {"A": -56}
    assert column.read(Decoder(io.BytesIO(b"\xc8")), False) == "A"


def test_direct_construction():
    column = EnumColumn("e", "Enum16('a'=1000)", {"a": 1000}, 16)
    buf, enc = _pair()
    column.write(enc, "a")
    assert buf.getvalue() == (1000).to_bytes(2, "little")


@pytest.mark.parametrize(
    "ch_type",
    ["Enum8", "Enum8('A')", "Enum16('A'=40000)", "Enum8('A'=x)", "Enum32('A'=1)"],
)
def test_parse_errors(ch_type):
    with pytest.raises(ValueError):
        parse_enum("e", ch_type)