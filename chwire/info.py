"""Client and server identification exchanged in the handshake."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone as _timezone
from datetime import tzinfo
from typing import Callable, Optional, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from chwire.columns.base import Decoder, Encoder
from chwire.protocol import DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE

__all__ = [
    "CLIENT_NAME",
    "CLICKHOUSE_REVISION",
    "CLICKHOUSE_DBMS_VERSION_MAJOR",
    "CLICKHOUSE_DBMS_VERSION_MINOR",
    "ClientInfo",
    "ServerInfo",
]

CLIENT_NAME = "chwire"
CLICKHOUSE_REVISION = 54213
CLICKHOUSE_DBMS_VERSION_MAJOR = 1
CLICKHOUSE_DBMS_VERSION_MINOR = 1

_T = TypeVar("_T")


class ClientInfo:
    """The client's name and version as sent in the hello packet."""

    def write(self, encoder: Encoder) -> None:
        encoder.string(CLIENT_NAME)
        encoder.uvarint(CLICKHOUSE_DBMS_VERSION_MAJOR)
        encoder.uvarint(CLICKHOUSE_DBMS_VERSION_MINOR)
        encoder.uvarint(CLICKHOUSE_REVISION)

    def __str__(self) -> str:
        return (
            f"{CLIENT_NAME} {CLICKHOUSE_DBMS_VERSION_MAJOR}."
            f"{CLICKHOUSE_DBMS_VERSION_MINOR}.{CLICKHOUSE_REVISION}"
        )


def _read(what: str, reader: Callable[[], _T]) -> _T:
    try:
        return reader()
    except (EOFError, ValueError) as exc:
        raise type(exc)(f"could not read {what}: {exc}") from exc


def _load_zone(key: str) -> tzinfo:
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        if key in ("UTC", "Etc/UTC"):
            return _timezone.utc
        raise ValueError(f"could not load time location: {exc}") from exc


@dataclass
class ServerInfo:
    """The server's name, version and time zone from its hello packet."""

    name: str = ""
    revision: int = 0
    minor_version: int = 0
    major_version: int = 0
    timezone: Optional[tzinfo] = None

    @classmethod
    def read(cls, decoder: Decoder) -> "ServerInfo":
        """Read the server hello body."""
        name = _read("server name", decoder.string)
        major = _read("server major version", decoder.uvarint)
        minor = _read("server minor version", decoder.uvarint)
        revision = _read("server revision", decoder.uvarint)
        zone = None
        if revision >= DBMS_MIN_REVISION_WITH_SERVER_TIMEZONE:
            zone = _load_zone(_read("server timezone", decoder.string))
        return cls(
            name=name,
            revision=revision,
            minor_version=minor,
            major_version=major,
            timezone=zone,
        )

    def __str__(self) -> str:
        zone = self.timezone if self.timezone is not None else "UTC"
        return (
            f"{self.name} {self.major_version}.{self.minor_version}."
            f"{self.revision} ({zone})"
        )