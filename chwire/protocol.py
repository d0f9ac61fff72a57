"""Packet codes and revision constants of the native ClickHouse protocol."""

from enum import IntEnum

__all__ = [
    "DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE",
    "DBMS_MIN_REVISION_WITH_QUOTA_KEY_IN_CLIENT_INFO",
    "COMPRESS_ENABLE",
    "COMPRESS_DISABLE",
    "STATE_COMPLETE",
    "ClientPacket",
    "ServerPacket",
]

DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE = 54058
DBMS_MIN_REVISION_WITH_QUOTA_KEY_IN_CLIENT_INFO = 54060

COMPRESS_ENABLE = 1
COMPRESS_DISABLE = 0

STATE_COMPLETE = 2


class ClientPacket(IntEnum):
    """Packet types sent by the client."""

    HELLO = 0
    QUERY = 1
    DATA = 2
    CANCEL = 3
    PING = 4


class ServerPacket(IntEnum):
    """Packet types sent by the server."""

    HELLO = 0
    DATA = 1
    EXCEPTION = 2
    PROGRESS = 3
    PONG = 4
    END_OF_STREAM = 5
    PROFILE_INFO = 6
    TOTALS = 7
    EXTREMES = 8