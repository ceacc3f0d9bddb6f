"""Pure binary packing functions for the SFO header and tables.

All functions are side-effect free and validate sizes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..document.models import SfoValue
from .codec import pack_u16, pack_u32, splice, unpack_u16, unpack_u32
from .constants import (
    MAGIC,
    VERSION,
    HEADER_SIZE,
    INDEX_ENTRY_SIZE,
    DATA_ALIGNMENT,
    KEY_TABLE_ALIGNMENT,
)
from .errors import (
    E_BAD_MAGIC,
    E_BAD_VERSION,
    E_TRUNCATED,
    format_error,
    internal_error,
)
from .layout import align_up, pad_to_size, resolve_length

__all__ = [
    "SfoHeader",
    "IndexRecord",
    "pack_header",
    "unpack_header",
    "pack_index_entry",
    "unpack_index_entry",
    "make_index_record",
    "next_index_record",
    "pack_key_table",
    "pack_value_slot",
]


@dataclass(frozen=True, slots=True)
class SfoHeader:
    key_table_offset: int
    value_table_offset: int
    entry_count: int


@dataclass(frozen=True, slots=True)
class IndexRecord:
    key_offset: int
    alignment: int
    data_type: int
    raw_size: int
    padded_size: int
    value_offset: int


def pack_header(
    key_table_offset: int, value_table_offset: int, entry_count: int
) -> bytes:
    out = bytearray(HEADER_SIZE)
    splice(out, MAGIC, 0)
    splice(out, VERSION, 4)
    splice(out, pack_u32(key_table_offset), 8)
    splice(out, pack_u32(value_table_offset), 12)
    splice(out, pack_u32(entry_count), 16)
    return bytes(out)


def unpack_header(raw: bytes) -> SfoHeader:
    if len(raw) < HEADER_SIZE:
        raise format_error(
            E_TRUNCATED,
            f"Header needs {HEADER_SIZE} bytes, got {len(raw)}",
        )
    if raw[0:4] != MAGIC:
        raise format_error(
            E_BAD_MAGIC, "Header magic mismatch", {"magic": raw[0:4].hex()}
        )
    if raw[4:8] != VERSION:
        raise format_error(
            E_BAD_VERSION,
            "Unsupported SFO version",
            {"version": raw[4:8].hex()},
        )
    return SfoHeader(
        key_table_offset=unpack_u32(raw, 8),
        value_table_offset=unpack_u32(raw, 12),
        entry_count=unpack_u32(raw, 16),
    )


def pack_index_entry(record: IndexRecord) -> bytes:
    if not 0 <= record.alignment <= 0xFF or not 0 <= record.data_type <= 0xFF:
        raise internal_error(
            "Index record alignment/type must fit a byte",
            {"alignment": record.alignment, "data_type": record.data_type},
        )
    out = bytearray(INDEX_ENTRY_SIZE)
    splice(out, pack_u16(record.key_offset), 0)
    out[2] = record.alignment
    out[3] = record.data_type
    splice(out, pack_u32(record.raw_size), 4)
    splice(out, pack_u32(record.padded_size), 8)
    splice(out, pack_u32(record.value_offset), 12)
    return bytes(out)


def unpack_index_entry(raw: bytes) -> IndexRecord:
    if len(raw) != INDEX_ENTRY_SIZE:
        raise format_error(
            E_TRUNCATED,
            f"Index record needs {INDEX_ENTRY_SIZE} bytes, got {len(raw)}",
        )
    return IndexRecord(
        key_offset=unpack_u16(raw, 0),
        alignment=raw[2],
        data_type=raw[3],
        raw_size=unpack_u32(raw, 4),
        padded_size=unpack_u32(raw, 8),
        value_offset=unpack_u32(raw, 12),
    )


def make_index_record(
    key_offset: int, value_offset: int, value: SfoValue, padded_size: int
) -> IndexRecord:
    return IndexRecord(
        key_offset=key_offset,
        alignment=DATA_ALIGNMENT,
        data_type=int(value.kind),
        raw_size=value.raw_length,
        padded_size=padded_size,
        value_offset=value_offset,
    )


def next_index_record(
    previous: Optional[IndexRecord],
    previous_key: bytes,
    key: str,
    value: SfoValue,
) -> IndexRecord:
    """Derive the record following ``previous`` for ``key``/``value``.

    ``previous_key`` is the encoded key of the previous record (ignored for
    the first record, where ``previous`` is None).
    """
    if previous is None:
        key_offset = 0
        value_offset = 0
    else:
        key_offset = previous.key_offset + len(previous_key) + 1
        value_offset = previous.value_offset + previous.padded_size
    padded = resolve_length(key, value.raw_length)
    return make_index_record(key_offset, value_offset, value, padded)


def pack_key_table(keys: Iterable[bytes]) -> bytes:
    table = b"".join(k + b"\x00" for k in keys)
    return pad_to_size(table, align_up(len(table), KEY_TABLE_ALIGNMENT))


def pack_value_slot(value: bytes, padded_size: int) -> bytes:
    return pad_to_size(value, padded_size)
