"""Date, DateTime and DateTime64 column types."""

from __future__ import annotations

import numbers
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Optional

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = ["Date", "DateTime", "DateTime64"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NAIVE_EPOCH = datetime(1970, 1, 1)
_EPOCH_DATE = date(1970, 1, 1)
_SECOND = timedelta(seconds=1)
_MICROSECOND = timedelta(microseconds=1)
_DAY_SECONDS = 24 * 3600

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_DATETIME_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")
_DATETIME64_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2}) ([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]+))?"
)


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def _wrap(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _localize(seconds: int, tz: Optional[tzinfo], micros: int = 0) -> datetime:
    return (_EPOCH + timedelta(seconds=seconds, microseconds=micros)).astimezone(tz)


def _is_zero(value: datetime) -> bool:
    return value.replace(tzinfo=None) == datetime.min


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.astimezone()
    return value


def _unix_seconds(value: datetime) -> int:
    return (_aware(value) - _EPOCH) // _SECOND


def _unix_nanos(value: datetime) -> int:
    return ((_aware(value) - _EPOCH) // _MICROSECOND) * 1000


class _Temporal(Column):
    scan_type = datetime

    def __init__(self, name: str, ch_type: str, timezone: Optional[tzinfo] = None) -> None:
        super().__init__(name, ch_type)
        self.timezone = timezone

    def default_value(self) -> Any:
        return 0


class Date(_Temporal):
    """A calendar day stored as days since the epoch."""

    def __init__(self, name: str, ch_type: str, timezone: Optional[tzinfo] = None) -> None:
        super().__init__(name, ch_type, timezone)
        offset = _EPOCH.astimezone(timezone).utcoffset()
        self._offset = int(offset.total_seconds()) if offset is not None else 0

    def read(self, decoder: Decoder, is_null: bool) -> datetime:
        days = decoder.int16()
        return _localize(days * _DAY_SECONDS - self._offset, self.timezone)

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, datetime):
            timestamp = (value.replace(tzinfo=None) - _NAIVE_EPOCH) // _SECOND
        elif isinstance(value, date):
            encoder.int16(_wrap((value - _EPOCH_DATE).days, 16))
            return
        elif _is_integer(value):
            timestamp = int(value) + self._offset
        elif isinstance(value, str):
            timestamp = self._parse(value)
        else:
            raise UnexpectedTypeError(self, value)
        encoder.int16(_wrap(_trunc_div(timestamp, _DAY_SECONDS), 16))

    @staticmethod
    def _parse(value: str) -> int:
        if not _DATE_RE.fullmatch(value):
            raise ValueError(f"cannot parse {value!r} as a date")
        parsed = datetime.strptime(value, "%Y-%m-%d")
        return (parsed - _NAIVE_EPOCH) // _SECOND


class DateTime(_Temporal):
    """A point in time stored as whole seconds since the epoch."""

    def __init__(self, name: str, ch_type: str, timezone: Optional[tzinfo] = None) -> None:
        super().__init__(name, ch_type, timezone)

    def read(self, decoder: Decoder, is_null: bool) -> datetime:
        return _localize(decoder.int32(), self.timezone)

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, datetime):
            timestamp = 0 if _is_zero(value) else _unix_seconds(value)
        elif _is_integer(value):
            timestamp = int(value)
        elif isinstance(value, str):
            timestamp = self._parse(value)
        else:
            raise UnexpectedTypeError(self, value)
        encoder.int32(_wrap(timestamp, 32))

    @staticmethod
    def _parse(value: str) -> int:
        """Parse wall-clock text in the local time zone."""
        if not _DATETIME_RE.fullmatch(value):
            raise ValueError(f"cannot parse {value!r} as a date and time")
        return _unix_seconds(datetime.strptime(value, "%Y-%m-%d %H:%M:%S"))


class DateTime64(_Temporal):
    """A point in time stored as ticks of 10**-precision seconds since the epoch."""

    def __init__(self, name: str, ch_type: str, timezone: Optional[tzinfo] = None) -> None:
        super().__init__(name, ch_type, timezone)

    def precision(self) -> int:
        """Return the number of sub-second digits declared by the column type."""
        params = self.ch_type[11:-1]
        first = params.split(",")[0]
        try:
            return int(first)
        except ValueError as exc:
            raise ValueError(f"invalid DateTime64 precision in {self.ch_type!r}") from exc

    def read(self, decoder: Decoder, is_null: bool) -> datetime:
        value = decoder.int64()
        precision = self.precision()
        nano = 0
        if precision <= 9:
            nano = value * 10 ** (9 - precision)
        seconds, rest = divmod(nano, 10**9)
        return _localize(seconds, self.timezone, rest // 1000)

    def write(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, datetime):
            timestamp = 0 if _is_zero(value) else _unix_nanos(value)
        elif _is_integer(value):
            timestamp = int(value)
        elif isinstance(value, str):
            timestamp = self._parse(value)
        else:
            raise UnexpectedTypeError(self, value)
        precision = self.precision()
        if precision > 9:
            raise ValueError(f"cannot write {self.ch_type}: precision above 9")
        timestamp = _trunc_div(timestamp, 10 ** (9 - precision))
        encoder.int64(_wrap(timestamp, 64))

    @staticmethod
    def _parse(value: str) -> int:
        """Parse UTC text with an optional fraction of a second into nanoseconds."""
        match = _DATETIME64_RE.fullmatch(value)
        if match is None:
            raise ValueError(f"cannot parse {value!r} as a date and time")
        year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
        parsed = datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)
        fraction = match.group(7) or ""
        nanos = int(fraction[:9].ljust(9, "0"))
        return ((parsed - _EPOCH) // _SECOND) * 10**9 + nanos