"""LZ4 block compression as used for compressed native-protocol frames."""

from __future__ import annotations

import struct

__all__ = [
    "MAX_INPUT_SIZE",
    "CorruptInputError",
    "InputTooLargeError",
    "compress_bound",
    "encode",
    "decode",
]

_ML_BITS = 4
_ML_MASK = (1 << _ML_BITS) - 1
_RUN_BITS = 8 - _ML_BITS
_RUN_MASK = (1 << _RUN_BITS) - 1

_MIN_MATCH = 4
_HASH_LOG = 16
_HASH_TABLE_SIZE = 1 << _HASH_LOG
_HASH_SHIFT = _MIN_MATCH * 8 - _HASH_LOG
_INCOMPRESSIBLE = 128
_UNINIT_HASH = 0x88888888
_M32 = 0xFFFFFFFF

MAX_INPUT_SIZE = 0x7E000000
"""The largest input that can be compressed in a single block (exclusive)."""

_DECR = (0, 3, 2, 3)
_U32 = struct.Struct("<I")


class CorruptInputError(ValueError):
    """The compressed input is malformed."""

    def __init__(self, message: str = "corrupt input") -> None:
        super().__init__(message)


class InputTooLargeError(ValueError):
    """The input is too large to compress into one block."""

    def __init__(self, message: str = "input too large") -> None:
        super().__init__(message)


def compress_bound(size: int) -> int:
    """Return the largest possible compressed size of ``size`` input bytes, or 0 if too large."""
    if size > MAX_INPUT_SIZE:
        return 0
    return size + size // 255 + 16


def _write_literals(out: bytearray, src: bytes, length: int, ml_len: int, pos: int) -> None:
    code = _RUN_MASK if length > _RUN_MASK - 1 else length
    token = code << _ML_BITS
    token += _ML_MASK if ml_len > _ML_MASK - 1 else ml_len
    out.append(token)

    if code == _RUN_MASK:
        remaining = length - _RUN_MASK
        while remaining > 254:
            out.append(255)
            remaining -= 255
        out.append(remaining)

    out += src[pos : pos + length]


def encode(src: bytes) -> bytes:
    """Compress ``src`` into a single LZ4 block."""
    if len(src) >= MAX_INPUT_SIZE:
        raise InputTooLargeError()
    src = bytes(src)
    size = len(src)
    out = bytearray()
    table = [0] * _HASH_TABLE_SIZE

    pos = 0
    anchor = 0
    step = 1
    limit = _INCOMPRESSIBLE

    while True:
        if pos + 12 >= size:
            _write_literals(out, src, size - anchor, 0, anchor)
            return bytes(out)

        sequence = _U32.unpack_from(src, pos)[0]
        slot = ((sequence * 2654435761) & _M32) >> _HASH_SHIFT
        ref = (table[slot] + _UNINIT_HASH) & _M32
        table[slot] = (pos - _UNINIT_HASH) & _M32

        if ((pos - ref) & _M32) >> 16 or _U32.unpack_from(src, ref)[0] != sequence:
            if pos - anchor > limit:
                limit <<= 1
                step += 1 + (step >> 2)
            pos += step
            continue

        if step > 1:
            table[slot] = (ref - _UNINIT_HASH) & _M32
            pos -= step - 1
            step = 1
            continue
        limit = _INCOMPRESSIBLE

        literal_len = pos - anchor
        back = pos - ref
        literal_start = anchor

        pos += _MIN_MATCH
        ref += _MIN_MATCH
        anchor = pos

        while pos < size - 5 and src[pos] == src[ref]:
            pos += 1
            ref += 1

        ml_len = pos - anchor

        _write_literals(out, src, literal_len, ml_len, literal_start)
        out.append(back & 0xFF)
        out.append((back >> 8) & 0xFF)

        if ml_len > _ML_MASK - 1:
            ml_len -= _ML_MASK
            while ml_len > 254:
                ml_len -= 255
                out.append(255)
            out.append(ml_len)

        anchor = pos


def _read_length(src: bytes, spos: int) -> tuple[int, int]:
    length = 0
    while True:
        if spos >= len(src):
            raise CorruptInputError()
        byte = src[spos]
        spos += 1
        length += byte
        if byte != 255:
            return length, spos


def _copy(dst: bytearray, dpos: int, ref: int, length: int) -> None:
    offset = dpos - ref
    if offset >= length:
        dst[dpos : dpos + length] = dst[ref : ref + length]
    elif offset > 0:
        pattern = bytes(dst[ref:dpos])
        repeated = pattern * (length // offset + 1)
        dst[dpos : dpos + length] = repeated[:length]
    else:
        for index in range(length):
            dst[dpos + index] = dst[ref + index]


def decode(src: bytes, size: int) -> bytes:
    """Decompress an LZ4 block into a buffer of ``size`` bytes and return that buffer."""
    src = bytes(src)
    end = len(src)
    dst = bytearray(size)
    spos = 0
    dpos = 0

    while True:
        if spos == end:
            return bytes(dst)
        code = src[spos]
        spos += 1

        length = code >> _ML_BITS
        if length == _RUN_MASK:
            extra, spos = _read_length(src, spos)
            length += extra

        if spos + length > end or dpos + length > size:
            raise CorruptInputError()

        dst[dpos : dpos + length] = src[spos : spos + length]
        spos += length
        dpos += length

        if spos == end:
            return bytes(dst)

        if spos + 2 >= end:
            raise CorruptInputError()

        back = src[spos] | (src[spos + 1] << 8)
        if back > dpos:
            raise CorruptInputError()

        spos += 2
        ref = dpos - back

        length = code & _ML_MASK
        if length == _ML_MASK:
            extra, spos = _read_length(src, spos)
            length += extra

        if back < 4:
            if dpos + 4 > size:
                raise CorruptInputError()
            _copy(dst, dpos, ref, 4)
            dpos += 4
            ref += 4 - _DECR[back]
        else:
            length += 4

        if dpos + length > size:
            raise CorruptInputError()

        _copy(dst, dpos, ref, length)
        dpos += length