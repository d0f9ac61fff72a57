import io
from datetime import timezone

import pytest

from chwire.columns.base import Decoder, Encoder
from chwire.info import (
    CLICKHOUSE_DBMS_VERSION_MAJOR,
    CLICKHOUSE_DBMS_VERSION_MINOR,
    CLICKHOUSE_REVISION,
    CLIENT_NAME,
    ClientInfo,
    ServerInfo,
)
from chwire.protocol import DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE


def _hello(name, major, minor, revision, zone=None):
    buf = io.BytesIO()
    encoder = Encoder(buf)
    encoder.string(name)
    encoder.uvarint(major)
    encoder.uvarint(minor)
    encoder.uvarint(revision)
    if zone is not None:
        encoder.string(zone)
    return Decoder(io.BytesIO(buf.getvalue()))


def test_client_info_write():
    buf = io.BytesIO()
    ClientInfo().write(Encoder(buf))
    decoder = Decoder(io.BytesIO(buf.getvalue()))
    assert decoder.string() == CLIENT_NAME
    assert decoder.uvarint() == CLICKHOUSE_DBMS_VERSION_MAJOR
    assert decoder.uvarint() == CLICKHOUSE_DBMS_VERSION_MINOR
    assert decoder.uvarint() == CLICKHOUSE_REVISION


def test_client_info_str():
    assert str(ClientInfo()) == f"{CLIENT_NAME} 1.1.54213"


def test_server_info_with_timezone():
    revision = DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE + 10
    info = ServerInfo.read(_hello("ClickHouse", 19, 17, revision, "UTC"))
    assert info.name == "ClickHouse"
    assert info.major_version == 19
    assert info.minor_version == 17
    assert info.revision == revision
    assert info.timezone is not None
    assert info.timezone.utcoffset(None) is not None


def test_server_info_old_revision_has_no_timezone():
    revision = DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE - 1
    info = ServerInfo.read(_hello("ClickHouse", 1, 1, revision))
    assert info.revision == revision
    assert info.timezone is None


def test_server_info_bad_timezone():
    revision = DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE
    with pytest.raises(ValueError, match="could not load time location"):
        ServerInfo.read(_hello("ClickHouse", 1, 1, revision, "Nowhere/Invalid_Zone"))


def test_server_info_truncated():
    buf = io.BytesIO()
    Encoder(buf).string("ClickHouse")
    with pytest.raises(EOFError, match="could not read server major version"):
        ServerInfo.read(Decoder(io.BytesIO(buf.getvalue())))


def test_server_info_str():
    info = ServerInfo(
        name="ClickHouse", revision=54428, minor_version=17, major_version=19, timezone=timezone.utc
    )
    assert str(info) == "ClickHouse 19.17.54428 (UTC)"