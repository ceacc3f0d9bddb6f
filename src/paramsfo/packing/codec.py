"""Little-endian integer helpers and fixed-offset byte splicing.

Encoders reject values that do not fit their field width with an
:class:`EncodingError`; decoders reject short input with a
:class:`FormatError`. Everything else in :mod:`paramsfo.packing` builds on
these.
"""

from __future__ import annotations

import struct

from .constants import MAX_U16, MAX_U32, MIN_I32, MAX_I32
from .errors import (
    E_TRUNCATED,
    E_VALUE_RANGE,
    encoding_error,
    format_error,
)

__all__ = [
    "pack_u16",
    "pack_u32",
    "pack_i32",
    "unpack_u16",
    "unpack_u32",
    "unpack_i32",
    "splice",
]

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")


def _check_range(value: int, low: int, high: int, label: str) -> None:
    if not isinstance(value, int) or value < low or value > high:
        raise encoding_error(
            E_VALUE_RANGE,
            f"{label} value out of range: {value!r}",
            {"min": low, "max": high},
        )


def _check_span(data: bytes, offset: int, size: int, label: str) -> None:
    if offset < 0 or offset + size > len(data):
        raise format_error(
            E_TRUNCATED,
            f"Out of range read for {label}: {offset}+{size}>{len(data)}",
        )


def pack_u16(value: int) -> bytes:
    _check_range(value, 0, MAX_U16, "u16")
    return _U16.pack(value)


def pack_u32(value: int) -> bytes:
    _check_range(value, 0, MAX_U32, "u32")
    return _U32.pack(value)


def pack_i32(value: int) -> bytes:
    _check_range(value, MIN_I32, MAX_I32, "i32")
    return _I32.pack(value)


def unpack_u16(data: bytes, offset: int = 0) -> int:
    _check_span(data, offset, 2, "u16")
    return _U16.unpack_from(data, offset)[0]


def unpack_u32(data: bytes, offset: int = 0) -> int:
    _check_span(data, offset, 4, "u32")
    return _U32.unpack_from(data, offset)[0]


def unpack_i32(data: bytes, offset: int = 0) -> int:
    _check_span(data, offset, 4, "i32")
    return _I32.unpack_from(data, offset)[0]


def splice(buffer: bytearray, chunk: bytes, offset: int) -> bytearray:
    """Overwrite ``buffer[offset:offset+len(chunk)]`` in place.

    The buffer never grows: a chunk that would run past its end is an
    internal layout bug, not a recoverable condition.
    """
    end = offset + len(chunk)
    if offset < 0 or end > len(buffer):
        raise ValueError(
            f"Splice out of bounds: {offset}+{len(chunk)}>{len(buffer)}"
        )
    buffer[offset:end] = chunk
    return buffer
