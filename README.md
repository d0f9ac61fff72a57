# chwire

Pure-Python building blocks for the ClickHouse native protocol, with no
dependencies outside the standard library:

- `chwire.columns` — typed column codecs: `Int8` … `UInt64`, `Float32`,
  `Float64`, `String`, `Date`, `DateTime`, `DateTime64`, `Decimal`,
  `EnumColumn` (Enum8/Enum16), `UUID`, `IPv4`, `IPv6`, and the `Nullable`,
  `Array` and `Tuple` wrappers, plus the `Encoder` and `Decoder` that read
  and write wire values on a binary stream;
- `chwire.block` — `Block`, which gathers rows column by column and writes
  them to the wire, or reads a block sent by a server;
- `chwire.info` — `ClientInfo` and `ServerInfo` for the handshake;
- `chwire.protocol` — packet codes (`ClientPacket`, `ServerPacket`) and
  revision constants;
- `chwire.lz4` — the LZ4 block format;
- `chwire.cityhash` — CityHash 64 and 128 (the 1.0.2 variant ClickHouse
  uses for checksums).

## Installation

```
pip install .
```

Running the tests:

```
pip install ".[test]"
pytest
```

## Columns

`chwire.columns.factory.create_column(name, ch_type, timezone)` builds a
column from a ClickHouse type name such as `UInt32`, `Nullable(String)`,
`Array(Array(Int64))`, `Tuple(String, Int8)`, `Enum8('A'=1,'B'=2)`,
`Decimal(18,5)`, `DateTime64(6)` or `SimpleAggregateFunction(max, UInt8)`.
The time zone is used by the date and time columns; `None` means local time.
A type name it does not know raises `ValueError`.

```python
import io
from datetime import timezone

from chwire.columns.base import Decoder, Encoder
from chwire.columns.factory import create_column

buffer = io.BytesIO()
column = create_column("id", "Nullable(Decimal(18,5))", timezone.utc)

column.write_null(Encoder(buffer), Encoder(buffer), 1123.12345)
column.write_null(Encoder(buffer), Encoder(buffer), None)
buffer.seek(0)
print(column.read_null(Decoder(buffer), 1))   # [112312345]
print(column.read_null(Decoder(buffer), 1))   # [None]
```

Plain columns have `read(decoder, is_null)` and `write(encoder, value)`.
`Nullable` values go through `write_null` / `read_null`, arrays are read with
`Array.read_array` and tuples with `Tuple.read_tuple`. A value of a type a
column cannot encode raises `UnexpectedTypeError`, which carries the column
and the rejected value; malformed text (a bad UUID, an unknown enum name, an
unparsable date) raises a `ValueError` subclass.

IP helpers in `chwire.columns.network`: `ip_to_bytes` gives the 16-byte form
of an address (IPv4 mapped), and `ip_from_value` turns raw bytes, text or an
address object into an `ipaddress` address.

## Blocks

```python
import io
from datetime import timezone

from chwire.block import Block
from chwire.columns.base import Encoder
from chwire.columns.factory import create_column
from chwire.info import ServerInfo

block = Block([
    create_column("id", "UInt32", timezone.utc),
    create_column("tags", "Array(String)", timezone.utc),
])
block.append_row([1, ["a", "b"]])
block.append_row([2, []])

out = io.BytesIO()
block.write(ServerInfo(), Encoder(out))
```

After `write` the block holds no staged rows but keeps its columns;
`reset` drops the columns as well, and `copy` returns an empty block with the
same columns. `Block.read(server_info, decoder)` decodes a block sent by a
server into `block.values`, one list per column, building each column from the
name and type given on the wire. The block header is read and written only
when `server_info.revision` is above zero.

`ServerInfo.read(decoder)` reads a server hello body; the server time zone is
read when the revision is at least
`protocol.DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE`. `ClientInfo().write(encoder)`
writes the client name and version.

## Compression and hashing

```python
from chwire import lz4
from chwire.cityhash import CityHash64, city_hash128

data = b"hello hello hello hello hello"
packed = lz4.encode(data)
assert lz4.decode(packed, len(data)) == data

checksum = city_hash128(packed)
print(checksum.to_bytes().hex())

hasher = CityHash64(b"hello")
print(hasher.intdigest(), hasher.digest().hex())
```

`lz4.decode` needs the decompressed size. Corrupted input raises
`lz4.CorruptInputError`; input of `lz4.MAX_INPUT_SIZE` bytes or more raises
`lz4.InputTooLargeError`.

## What it does not do

chwire encodes and decodes the pieces of the protocol; it does not open
connections, send queries, frame compressed packets (checksum and header
around an LZ4 block) or decode server exceptions and progress packets. It has
no database-API driver and no command-line tool. `FixedString(N)` columns are
not among the types `create_column` builds.