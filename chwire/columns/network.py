"""IP address helpers and the IPv4 and IPv6 column types."""

from __future__ import annotations

import ipaddress
from typing import Any, Optional, Union

from chwire.columns.base import Column, Decoder, Encoder, UnexpectedTypeError

__all__ = [
    "InvalidScanValueError",
    "InvalidScanTypeError",
    "ip_to_bytes",
    "ip_from_value",
    "IPv4",
    "IPv6",
]

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
_ADDRESS_TYPES = (ipaddress.IPv4Address, ipaddress.IPv6Address)


class InvalidScanValueError(ValueError):
    """The value cannot be turned into an IP address."""

    def __init__(self, message: str = "Invalid scan value") -> None:
        super().__init__(message)


class InvalidScanTypeError(TypeError):
    """The value is of a type that cannot hold an IP address."""

    def __init__(self, message: str = "Invalid scan types") -> None:
        super().__init__(message)


def _normalize(address: Address) -> Address:
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        return address.ipv4_mapped
    return address


def _from_packed(data: bytes) -> Address:
    if len(data) == 4:
        return ipaddress.IPv4Address(data)
    return _normalize(ipaddress.IPv6Address(data))


def _parse_ip(text: str) -> Optional[Address]:
    if "%" in text:
        return None
    try:
        return _normalize(ipaddress.ip_address(text))
    except ValueError:
        return None


def ip_to_bytes(address: Union[Address, bytes, bytearray]) -> bytes:
    """Return the 16-byte form of an address, right-aligned; IPv4 is IPv4-mapped."""
    if isinstance(address, _ADDRESS_TYPES):
        raw = address.packed
    elif isinstance(address, (bytes, bytearray, memoryview)):
        raw = bytes(address)
    else:
        raise InvalidScanTypeError()
    if len(raw) >= 16:
        return raw
    buffer = bytearray(16 - len(raw)) + raw
    if len(raw) == 4:
        buffer[10] = 0xFF
        buffer[11] = 0xFF
    return bytes(buffer)


def ip_from_value(value: Any) -> Optional[Address]:
    """Turn raw bytes, text or an address into an address.

    Text that does not parse as an address gives None.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) in (4, 16):
            return _from_packed(raw)
        raise InvalidScanValueError()
    if isinstance(value, str):
        if not value:
            raise InvalidScanValueError()
        raw = value.encode("utf-8", "surrogateescape")
        if len(raw) in (4, 16) and "." not in value and ":" not in value:
            return _from_packed(raw)
        return _parse_ip(value)
    if isinstance(value, _ADDRESS_TYPES):
        return _normalize(value)
    raise InvalidScanTypeError()


def _address_for_write(column: Column, value: Any) -> Address:
    if isinstance(value, str):
        address = _parse_ip(value)
    elif isinstance(value, _ADDRESS_TYPES):
        address = _normalize(value)
    else:
        raise UnexpectedTypeError(column, value)
    if address is None:
        raise UnexpectedTypeError(column, value)
    return address


class IPv4(Column):
    """An IPv4 address stored as four bytes in reverse order."""

    scan_type = ipaddress.IPv4Address
    default = ipaddress.IPv4Address(0)

    def read(self, decoder: Decoder, is_null: bool) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(decoder.fixed(4)[::-1])

    def write(self, encoder: Encoder, value: Any) -> None:
        address = _address_for_write(self, value)
        if not isinstance(address, ipaddress.IPv4Address):
            raise UnexpectedTypeError(self, value)
        encoder.write(address.packed[::-1])


class IPv6(Column):
    """An IPv6 address stored as sixteen bytes; IPv4 addresses are mapped."""

    scan_type = ipaddress.IPv6Address
    default = ipaddress.IPv6Address(0)

    def read(self, decoder: Decoder, is_null: bool) -> Address:
        return _from_packed(decoder.fixed(16))

    def write(self, encoder: Encoder, value: Any) -> None:
        encoder.write(ip_to_bytes(_address_for_write(self, value)))