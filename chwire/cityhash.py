"""CityHash 1.0.2 (64- and 128-bit variants) as used by the ClickHouse wire format."""

from __future__ import annotations

import struct
from dataclasses import dataclass

__all__ = [
    "Uint128",
    "CityHash64",
    "city_hash64",
    "city_hash64_with_seed",
    "city_hash64_with_seeds",
    "city_hash128",
    "city_hash128_with_seed",
]

_MASK = 0xFFFFFFFFFFFFFFFF

K0 = 0xC3A5C85C97CB3127
K1 = 0xB492B66FBE98F273
K2 = 0x9AE16A3B2F90404F
K3 = 0xC949D7C7509E6557
KMUL = 0x9DDFEA08EB382D69

_U64 = struct.Struct("<Q")
_U32 = struct.Struct("<I")


@dataclass(frozen=True)
class Uint128:
    """A 128-bit value held as its low and high 64-bit halves."""

    low: int
    high: int

    def to_bytes(self) -> bytes:
        """Return the 16 little-endian bytes, low half first."""
        return _U64.pack(self.low) + _U64.pack(self.high)


def _f64(s: bytes, offset: int) -> int:
    return _U64.unpack_from(s, offset)[0]


def _f32(s: bytes, offset: int) -> int:
    return _U32.unpack_from(s, offset)[0]


def _rot(value: int, shift: int) -> int:
    if shift == 0:
        return value
    return ((value >> shift) | (value << (64 - shift))) & _MASK


def _shift_mix(value: int) -> int:
    return value ^ (value >> 47)


def _hash_len16(u: int, v: int, mul: int = KMUL) -> int:
    a = ((u ^ v) * mul) & _MASK
    a ^= a >> 47
    b = ((v ^ a) * mul) & _MASK
    b ^= b >> 47
    return (b * mul) & _MASK


def _hash_len0to16(s: bytes, length: int) -> int:
    if length > 8:
        a = _f64(s, 0)
        b = _f64(s, length - 8)
        return _hash_len16(a, _rot((b + length) & _MASK, length)) ^ b
    if length >= 4:
        a = _f32(s, 0)
        return _hash_len16((length + (a << 3)) & _MASK, _f32(s, length - 4))
    if length > 0:
        a = s[0]
        b = s[length >> 1]
        c = s[length - 1]
        y = a + (b << 8)
        z = length + (c << 2)
        mixed = ((y * K2) & _MASK) ^ ((z * K3) & _MASK)
        return (_shift_mix(mixed) * K2) & _MASK
    return K2


def _hash_len17to32(s: bytes, length: int) -> int:
    a = (_f64(s, 0) * K1) & _MASK
    b = _f64(s, 8)
    c = (_f64(s, length - 8) * K2) & _MASK
    d = (_f64(s, length - 16) * K0) & _MASK
    return _hash_len16(
        (_rot((a - b) & _MASK, 43) + _rot(c, 30) + d) & _MASK,
        (a + _rot(b ^ K3, 20) - c + length) & _MASK,
    )


def _weak(w: int, x: int, y: int, z: int, a: int, b: int) -> tuple[int, int]:
    a = (a + w) & _MASK
    b = _rot((b + a + z) & _MASK, 21)
    c = a
    a = (a + x + y) & _MASK
    b = (b + _rot(a, 44)) & _MASK
    return (a + z) & _MASK, (b + c) & _MASK


def _weak_at(s: bytes, offset: int, a: int, b: int) -> tuple[int, int]:
    return _weak(
        _f64(s, offset),
        _f64(s, offset + 8),
        _f64(s, offset + 16),
        _f64(s, offset + 24),
        a,
        b,
    )


def _hash_len33to64(s: bytes, length: int) -> int:
    z = _f64(s, 24)
    a = (_f64(s, 0) + (length + _f64(s, length - 16)) * K0) & _MASK
    b = _rot((a + z) & _MASK, 52)
    c = _rot(a, 37)
    a = (a + _f64(s, 8)) & _MASK
    c = (c + _rot(a, 7)) & _MASK
    a = (a + _f64(s, 16)) & _MASK
    vf = (a + z) & _MASK
    vs = (b + _rot(a, 31) + c) & _MASK

    a = (_f64(s, 16) + _f64(s, length - 32)) & _MASK
    z = _f64(s, length - 8)
    b = _rot((a + z) & _MASK, 52)
    c = _rot(a, 37)
    a = (a + _f64(s, length - 24)) & _MASK
    c = (c + _rot(a, 7)) & _MASK
    a = (a + _f64(s, length - 16)) & _MASK
    wf = (a + z) & _MASK
    ws = (b + _rot(a, 31) + c) & _MASK
    r = _shift_mix(((vf + ws) * K2 + (wf + vs) * K0) & _MASK)
    return (_shift_mix((r * K0 + vs) & _MASK) * K2) & _MASK


def _city64(s: bytes) -> int:
    length = len(s)
    if length <= 16:
        return _hash_len0to16(s, length)
    if length <= 32:
        return _hash_len17to32(s, length)
    if length <= 64:
        return _hash_len33to64(s, length)

    x = _f64(s, 0)
    y = _f64(s, length - 16) ^ K1
    z = _f64(s, length - 56) ^ K0
    v = _weak_at(s, length - 64, length, y)
    w = _weak_at(s, length - 32, (length * K1) & _MASK, K0)
    z = (z + _shift_mix(v[1]) * K1) & _MASK
    x = (_rot((z + x) & _MASK, 39) * K1) & _MASK
    y = (_rot(y, 33) * K1) & _MASK

    remaining = (length - 1) & ~63
    pos = 0
    while True:
        x = (_rot((x + y + v[0] + _f64(s, pos + 16)) & _MASK, 37) * K1) & _MASK
        y = (_rot((y + v[1] + _f64(s, pos + 48)) & _MASK, 42) * K1) & _MASK
        x ^= w[1]
        y ^= v[0]
        z = _rot(z ^ w[0], 33)
        v = _weak_at(s, pos, (v[1] * K1) & _MASK, (x + w[0]) & _MASK)
        w = _weak_at(s, pos + 32, (z + w[1]) & _MASK, y)
        z, x = x, z
        pos += 64
        remaining -= 64
        if remaining == 0:
            break

    return _hash_len16(
        (_hash_len16(v[0], w[0]) + _shift_mix(y) * K1 + z) & _MASK,
        (_hash_len16(v[1], w[1]) + x) & _MASK,
    )


def _city_murmur(s: bytes, length: int, seed: Uint128) -> Uint128:
    a = seed.low
    b = seed.high
    remaining = length - 16

    if remaining <= 0:
        a = (_shift_mix((a * K1) & _MASK) * K1) & _MASK
        c = (b * K1 + _hash_len0to16(s, length)) & _MASK
        if length >= 8:
            d = _shift_mix((a + _f64(s, 0)) & _MASK)
        else:
            d = _shift_mix((a + c) & _MASK)
    else:
        c = _hash_len16((_f64(s, length - 8) + K1) & _MASK, a)
        d = _hash_len16((b + length) & _MASK, (c + _f64(s, length - 16)) & _MASK)
        a = (a + d) & _MASK
        pos = 0
        while True:
            a ^= (_shift_mix((_f64(s, pos) * K1) & _MASK) * K1) & _MASK
            a = (a * K1) & _MASK
            b ^= a
            c ^= (_shift_mix((_f64(s, pos + 8) * K1) & _MASK) * K1) & _MASK
            c = (c * K1) & _MASK
            d ^= c
            pos += 16
            remaining -= 16
            if remaining <= 0:
                break

    a = _hash_len16(a, c)
    b = _hash_len16(d, b)
    return Uint128(a ^ b, _hash_len16(b, a))


def _city128_with_seed(s: bytes, length: int, seed: Uint128) -> Uint128:
    if length < 128:
        return _city_murmur(s, length, seed)

    x = seed.low
    y = seed.high
    z = (length * K1) & _MASK

    v0 = (_rot(y ^ K1, 49) * K1 + _f64(s, 0)) & _MASK
    v1 = (_rot(v0, 42) * K1 + _f64(s, 8)) & _MASK
    w0 = (_rot((y + z) & _MASK, 35) * K1 + x) & _MASK
    w1 = (_rot((x + _f64(s, 88)) & _MASK, 53) * K1) & _MASK

    pos = 0
    while True:
        for _ in range(2):
            x = (_rot((x + y + v0 + _f64(s, pos + 16)) & _MASK, 37) * K1) & _MASK
            y = (_rot((y + v1 + _f64(s, pos + 48)) & _MASK, 42) * K1) & _MASK
            x ^= w1
            y ^= v0
            z = _rot(z ^ w0, 33)
            v0, v1 = _weak_at(s, pos, (v1 * K1) & _MASK, (x + w0) & _MASK)
            w0, w1 = _weak_at(s, pos + 32, (z + w1) & _MASK, y)
            z, x = x, z
            pos += 64
        length -= 128
        if length < 128:
            break

    y = (y + _rot(w0, 37) * K0 + z) & _MASK
    x = (x + _rot((v0 + z) & _MASK, 49) * K0) & _MASK

    tail_done = 0
    while tail_done < length:
        tail_done += 32
        y = (_rot((y - x) & _MASK, 42) * K0 + v1) & _MASK
        w0 = (w0 + _f64(s, pos + length - tail_done + 16)) & _MASK
        x = (_rot(x, 49) * K0 + w0) & _MASK
        w0 = (w0 + v0) & _MASK
        v0, v1 = _weak_at(s, pos + length - tail_done, v0, v1)

    x = _hash_len16(x, v0)
    y = _hash_len16(y, w0)
    return Uint128(
        (_hash_len16((x + v1) & _MASK, w1) + y) & _MASK,
        _hash_len16((x + w1) & _MASK, (y + v1) & _MASK),
    )


def city_hash64(data: bytes) -> int:
    """Return the 64-bit CityHash of ``data``."""
    return _city64(bytes(data))


def city_hash64_with_seed(data: bytes, seed: int) -> int:
    """Return the 64-bit CityHash of ``data`` mixed with one seed."""
    return city_hash64_with_seeds(data, K2, seed)


def city_hash64_with_seeds(data: bytes, seed0: int, seed1: int) -> int:
    """Return the 64-bit CityHash of ``data`` mixed with two seeds."""
    return _hash_len16((city_hash64(data) - seed0) & _MASK, seed1 & _MASK)


def city_hash128_with_seed(data: bytes, seed: Uint128) -> Uint128:
    """Return the 128-bit CityHash of ``data`` for the given seed."""
    s = bytes(data)
    return _city128_with_seed(s, len(s), seed)


def city_hash128(data: bytes) -> Uint128:
    """Return the 128-bit CityHash of ``data`` (the variant ClickHouse checksums use)."""
    s = bytes(data)
    length = len(s)
    if length >= 16:
        seed = Uint128(_f64(s, 0) ^ K3, _f64(s, 8))
        return _city128_with_seed(s[16:], length - 16, seed)
    if length >= 8:
        seed = Uint128(
            _f64(s, 0) ^ ((length * K0) & _MASK),
            _f64(s, length - 8) ^ K1,
        )
        return _city128_with_seed(b"", 0, seed)
    return _city128_with_seed(s, length, Uint128(K0, K1))


class CityHash64:
    """Incremental 64-bit CityHash with a hashlib-like interface."""

    digest_size = 8
    block_size = 1

    def __init__(self, data: bytes = b"") -> None:
        self._buffer = bytearray(data)

    def update(self, data: bytes) -> None:
        """Append ``data`` to what is hashed."""
        self._buffer.extend(data)

    def intdigest(self) -> int:
        """Return the hash of everything written so far as an integer."""
        return _city64(bytes(self._buffer))

    def digest(self) -> bytes:
        """Return the hash as 8 big-endian bytes."""
        return self.intdigest().to_bytes(8, "big")

    def reset(self) -> None:
        """Forget everything written so far."""
        self._buffer.clear()