import io
from datetime import timezone

import pytest

from chwire.block import Block
from chwire.columns.base import Decoder, Encoder
from chwire.columns.factory import create_column
from chwire.info import ServerInfo

SERVER = ServerInfo(name="ClickHouse", revision=54428, timezone=timezone.utc)
OLD_SERVER = ServerInfo(revision=0, timezone=timezone.utc)


def _send(block, server):
    buf = io.BytesIO()
    block.write(server, Encoder(buf))
    return buf.getvalue()


def _receive(data, server):
    block = Block()
    block.read(server, Decoder(io.BytesIO(data)))
    return block


def _block(*specs):
    return Block([create_column(name, ch_type, timezone.utc) for name, ch_type in specs])


def test_roundtrip_simple_columns():
    block = _block(("id", "Int32"), ("name", "String"))
    block.append_row([1, "a"])
    block.append_row([2, "b"])
    received = _receive(_send(block, SERVER), SERVER)
    assert received.column_names() == ["id", "name"]
    assert received.num_rows == 2
    assert received.num_columns == 2
    assert received.values == [[1, 2], ["a", "b"]]
    assert received.info.bucket_num == -1
    assert received.info.is_overflows is False


def test_roundtrip_without_block_info():
    block = _block(("id", "UInt64"))
    block.append_row([7])
    received = _receive(_send(block, OLD_SERVER), OLD_SERVER)
    assert received.values == [[7]]


def test_roundtrip_nullable_and_arrays():
    block = _block(
        ("n", "Nullable(String)"),
        ("a", "Array(Int8)"),
        ("aa", "Array(Array(Int16))"),
        ("an", "Array(Nullable(Int8))"),
    )
    block.append_row(["x", [1, 2], [[1], [2, 3]], [1, None]])
    block.append_row([None, [], [[]], []])
    block.append_row(["y", [3], [], [None]])
    received = _receive(_send(block, SERVER), SERVER)
    assert received.values == [
        ["x", None, "y"],
        [[1, 2], [], [3]],
        [[[1], [2, 3]], [[]], []],
        [[1, None], [], [None]],
    ]


def test_empty_block_wire_bytes():
    data = _send(Block(), SERVER)
    assert data == b"\x01\x00\x02\xff\xff\xff\xff\x00" + b"\x00\x00"


def test_write_without_rows_sends_header_only():
    block = _block(("id", "Int32"))
    received = _receive(_send(block, OLD_SERVER), OLD_SERVER)
    assert received.column_names() == ["id"]
    assert received.num_rows == 0
    assert received.values == [[]]


def test_write_resets_row_count():
    block = _block(("id", "Int32"))
    block.append_row([1])
    assert block.num_rows == 1
    _send(block, SERVER)
    assert block.num_rows == 0
    block.append_row([5])
    received = _receive(_send(block, SERVER), SERVER)
    assert received.values == [[5]]


def test_append_row_wrong_count():
    block = _block(("id", "Int32"), ("name", "String"))
    with pytest.raises(ValueError, match="expected 2 arguments"):
        block.append_row([1])


def test_append_row_array_needs_sequence():
    block = _block(("a", "Array(Int8)"))
    with pytest.raises(TypeError, match="unsupported Array"):
        block.append_row([5])


def test_copy_keeps_columns_only():
    block = _block(("id", "Int32"))
    block.append_row([1])
    copied = block.copy()
    assert copied.column_names() == ["id"]
    assert copied.num_columns == 1
    assert copied.num_rows == 0


def test_reset_clears_everything():
    block = _block(("id", "Int32"))
    block.append_row([1])
    block.reset()
    assert block.columns == []
    assert block.num_rows == 0
    assert block.num_columns == 0
    assert block.values == []