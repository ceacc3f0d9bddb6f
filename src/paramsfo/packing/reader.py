"""Sequential SFO reader.

The reader only ever calls ``stream.read(n)``: no seeks, no ``tell``. It
walks header, index table, key table and value table in file order and
tracks how many bytes it has consumed so padding can be skipped on
forward-only sources (pipes, sockets, decompressors).
"""

from __future__ import annotations

import io
from typing import BinaryIO, List

from ..document.models import SfoDocument, SfoValue, ValueKind
from ..logging import get_logger
from ..reporting import get_reporter, task
from .constants import (
    DATA_ALIGNMENT,
    HEADER_SIZE,
    INDEX_ENTRY_SIZE,
    NUMBER_SIZE,
    READ_CHUNK_SIZE,
)
from .errors import (
    E_DATA_TYPE,
    E_DUP_KEY,
    E_KEY,
    E_NON_MONOTONIC,
    E_OFFSET_RANGE,
    E_SIZE_MISMATCH,
    E_TRUNCATED,
    format_error,
)
from .packers import IndexRecord, SfoHeader, unpack_header, unpack_index_entry

__all__ = ["read_sfo", "read_sfo_bytes"]


class _ForwardSource:
    """Counts consumed bytes over a forward-only binary stream."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.position = 0

    def read_exact(self, size: int, label: str) -> bytes:
        chunks: List[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                raise format_error(
                    E_TRUNCATED,
                    f"Unexpected end of stream in {label}: "
                    f"needed {size} bytes at {self.position}, got {size - remaining}",
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        self.position += size
        return b"".join(chunks)

    def skip(self, size: int, label: str) -> None:
        if size < 0:
            raise format_error(
                E_NON_MONOTONIC,
                f"Cannot move backwards by {-size} bytes in {label}",
                {"position": self.position},
            )
        while size > 0:
            step = min(size, READ_CHUNK_SIZE)
            self.read_exact(step, label)
            size -= step


def _check_header(header: SfoHeader) -> None:
    index_end = HEADER_SIZE + header.entry_count * INDEX_ENTRY_SIZE
    if header.key_table_offset < index_end:
        raise format_error(
            E_OFFSET_RANGE,
            "Key table overlaps index table",
            {
                "key_table_offset": header.key_table_offset,
                "index_end": index_end,
            },
        )
    if header.value_table_offset < header.key_table_offset:
        raise format_error(
            E_OFFSET_RANGE,
            "Value table starts before key table",
            {
                "key_table_offset": header.key_table_offset,
                "value_table_offset": header.value_table_offset,
            },
        )


def _decode_key(table: bytes, offset: int, index: int) -> str:
    if offset >= len(table):
        raise format_error(
            E_OFFSET_RANGE,
            f"Key offset {offset} outside key table of {len(table)} bytes",
            {"index": index},
        )
    end = table.find(b"\x00", offset)
    if end == -1:
        raise format_error(
            E_KEY, "Key is not NUL-terminated", {"index": index, "offset": offset}
        )
    if end == offset:
        raise format_error(E_KEY, "Empty key", {"index": index, "offset": offset})
    try:
        return table[offset:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise format_error(
            E_KEY, "Key is not valid UTF-8", {"index": index, "offset": offset}
        ) from exc


def _value_kind(record: IndexRecord, key: str) -> ValueKind:
    try:
        kind = ValueKind(record.data_type)
    except ValueError:
        raise format_error(
            E_DATA_TYPE,
            f"Unknown data type 0x{record.data_type:02x} for {key}",
        ) from None
    if kind is ValueKind.NUMBER and record.raw_size != NUMBER_SIZE:
        raise format_error(
            E_SIZE_MISMATCH,
            f"Number {key} has raw size {record.raw_size}",
        )
    return kind


def read_sfo(stream: BinaryIO) -> SfoDocument:
    """Parse an SFO file from ``stream`` into a :class:`SfoDocument`.

    The caller keeps ownership of ``stream``; it is read but not closed.
    """
    logger = get_logger()
    rep = get_reporter()
    source = _ForwardSource(stream)

    header = unpack_header(source.read_exact(HEADER_SIZE, "header"))
    _check_header(header)

    records: List[IndexRecord] = []
    for i in range(header.entry_count):
        raw = source.read_exact(INDEX_ENTRY_SIZE, f"index[{i}]")
        records.append(unpack_index_entry(raw))

    source.skip(header.key_table_offset - source.position, "key table gap")
    key_table = source.read_exact(
        header.value_table_offset - header.key_table_offset, "key table"
    )
    keys = [_decode_key(key_table, r.key_offset, i) for i, r in enumerate(records)]

    document = SfoDocument()
    value_base = header.value_table_offset
    with task("read.values", "Value table", total=header.entry_count):
        for record, key in zip(records, keys):
            if record.alignment != DATA_ALIGNMENT:
                rep.verbose(f"{key}: unusual alignment byte {record.alignment}")
            kind = _value_kind(record, key)
            consumed = source.position - value_base
            source.skip(record.value_offset - consumed, f"value {key}")
            raw = source.read_exact(record.raw_size, f"value {key}")
            consumed = source.position - value_base
            source.skip(
                (record.value_offset + record.padded_size) - consumed,
                f"padding of {key}",
            )
            if key in document:
                raise format_error(E_DUP_KEY, f"Duplicate key {key}")
            document[key] = SfoValue(kind, raw)
            rep.advance("read.values", current_item=key)

    logger.debug(
        "Read SFO entries=%d bytes=%d", header.entry_count, source.position
    )
    return document


def read_sfo_bytes(data: bytes) -> SfoDocument:
    return read_sfo(io.BytesIO(data))
