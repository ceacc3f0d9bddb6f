"""Layout planning: compute every offset and size of an SFO file up front.

The planner folds over the document in serialization order, deriving each
index record from the previous one with :func:`next_index_record`, and
produces an immutable :class:`SfoPlan`. The writer consumes the plan and
never does its own offset arithmetic, so all representability checks happen
here, before any byte is emitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..document.models import SfoDocument, SfoValue, ValueKind
from ..logging import get_logger
from ..reporting import get_reporter
from .constants import (
    HEADER_SIZE,
    INDEX_ENTRY_SIZE,
    KEY_TABLE_ALIGNMENT,
    MAX_U16,
    MAX_U32,
)
from .errors import (
    E_KEY,
    E_KEY_TABLE_OVERFLOW,
    E_VALUE_RANGE,
    E_VALUE_TOO_LONG,
    encoding_error,
)
from .layout import align_up, fixed_slot_size
from .packers import IndexRecord, SfoHeader, next_index_record

__all__ = [
    "OVERSIZE_POLICIES",
    "WriteOptions",
    "EntryPlan",
    "TablePlan",
    "PaddingStats",
    "SfoPlan",
    "compute_sfo_plan",
    "to_plan_dict",
]

OVERSIZE_POLICIES = ("reject", "truncate")


@dataclass(slots=True)
class WriteOptions:
    # What to do with a value longer than its key's fixed slot
    # (TITLE*, TITLE_ID, LICENSE).
    oversize: str = "reject"

    def __post_init__(self) -> None:
        if self.oversize not in OVERSIZE_POLICIES:
            raise ValueError(
                f"oversize must be one of {OVERSIZE_POLICIES}, got {self.oversize!r}"
            )


@dataclass(slots=True)
class EntryPlan:
    key: str
    key_bytes: bytes
    value: SfoValue
    record: IndexRecord
    truncated: bool = False

    @property
    def padding(self) -> int:
        return self.record.padded_size - self.record.raw_size


@dataclass(slots=True)
class TablePlan:
    name: str
    offset: int
    size: int
    padding_after: int = 0


@dataclass(slots=True)
class PaddingStats:
    total: int
    by_section: Dict[str, int]


@dataclass(slots=True)
class SfoPlan:
    header: SfoHeader
    index_table: TablePlan
    key_table: TablePlan
    value_table: TablePlan
    entries: List[EntryPlan]
    padding: PaddingStats
    file_size: int

    @property
    def tables(self) -> List[TablePlan]:
        return [self.index_table, self.key_table, self.value_table]


def _encode_key(key: str) -> bytes:
    if not key:
        raise encoding_error(E_KEY, "Keys must be non-empty")
    if "\x00" in key:
        raise encoding_error(E_KEY, f"Key contains NUL: {key!r}")
    try:
        return key.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise encoding_error(
            E_KEY, f"Key is not representable as UTF-8: {key!r}"
        ) from exc


def _truncate(value: SfoValue, size: int) -> SfoValue:
    cut = size
    if value.kind is ValueKind.STRING:
        # Back off to the first byte of a UTF-8 sequence.
        while cut > 0 and (value.data[cut] & 0xC0) == 0x80:
            cut -= 1
    return SfoValue(value.kind, value.data[:cut])


def _fit_value(
    key: str, value: SfoValue, options: WriteOptions
) -> tuple[SfoValue, bool]:
    slot = fixed_slot_size(key)
    if slot is None or value.raw_length <= slot:
        return value, False
    if options.oversize == "truncate":
        return _truncate(value, slot), True
    raise encoding_error(
        E_VALUE_TOO_LONG,
        f"Value for {key} is {value.raw_length} bytes, slot is {slot}",
        {"key": key, "raw_size": value.raw_length, "slot": slot},
    )


def compute_sfo_plan(
    document: SfoDocument, options: Optional[WriteOptions] = None
) -> SfoPlan:
    options = options or WriteOptions()
    logger = get_logger()
    rep = get_reporter()

    entries: List[EntryPlan] = []
    previous: Optional[IndexRecord] = None
    previous_key = b""
    for entry in document.entries():
        key_bytes = _encode_key(entry.key)
        value, truncated = _fit_value(entry.key, entry.value, options)
        if truncated:
            logger.warning(
                "Truncated %s from %d to %d bytes",
                entry.key,
                entry.value.raw_length,
                value.raw_length,
            )
        record = next_index_record(previous, previous_key, entry.key, value)
        if record.key_offset > MAX_U16:
            raise encoding_error(
                E_KEY_TABLE_OVERFLOW,
                f"Key offset {record.key_offset} for {entry.key} exceeds u16 range",
            )
        if record.value_offset + record.padded_size > MAX_U32:
            raise encoding_error(
                E_VALUE_RANGE,
                f"Value table exceeds u32 range at {entry.key}",
            )
        entries.append(EntryPlan(entry.key, key_bytes, value, record, truncated))
        previous, previous_key = record, key_bytes

    # End of the last record is where each table's content stops.
    key_cursor = 0
    value_cursor = 0
    if previous is not None:
        key_cursor = previous.key_offset + len(previous_key) + 1
        value_cursor = previous.value_offset + previous.padded_size

    count = len(entries)
    index_size = count * INDEX_ENTRY_SIZE
    key_size = align_up(key_cursor, KEY_TABLE_ALIGNMENT)
    key_offset = HEADER_SIZE + index_size
    value_offset = key_offset + key_size
    file_size = value_offset + value_cursor
    if file_size > MAX_U32:
        raise encoding_error(E_VALUE_RANGE, f"File size {file_size} exceeds u32")

    by_section = {
        "key_table": key_size - key_cursor,
        "value_table": sum(e.padding for e in entries),
    }
    plan = SfoPlan(
        header=SfoHeader(key_offset, value_offset, count),
        index_table=TablePlan("index", HEADER_SIZE, index_size),
        key_table=TablePlan(
            "key", key_offset, key_size, padding_after=key_size - key_cursor
        ),
        value_table=TablePlan("value", value_offset, value_cursor),
        entries=entries,
        padding=PaddingStats(sum(by_section.values()), by_section),
        file_size=file_size,
    )
    rep.verbose(
        f"Plan: entries={count} key_table={key_offset}+{key_size} "
        f"value_table={value_offset}+{value_cursor} file_size={file_size}"
    )
    return plan


def to_plan_dict(plan: SfoPlan) -> Dict[str, Any]:
    def table(t: TablePlan):
        return {
            "name": t.name,
            "offset": t.offset,
            "size": t.size,
            "padding_after": t.padding_after,
        }

    def entry(e: EntryPlan):
        r = e.record
        return {
            "key": e.key,
            "kind": ValueKind(r.data_type).name.lower(),
            "key_offset": r.key_offset,
            "value_offset": r.value_offset,
            "raw_size": r.raw_size,
            "padded_size": r.padded_size,
            "truncated": e.truncated,
        }

    return {
        "file_size": plan.file_size,
        "header": {
            "key_table_offset": plan.header.key_table_offset,
            "value_table_offset": plan.header.value_table_offset,
            "entry_count": plan.header.entry_count,
        },
        "tables": [table(t) for t in plan.tables],
        "entries": [entry(e) for e in plan.entries],
        "padding": {
            "total": plan.padding.total,
            "by_section": dict(plan.padding.by_section),
        },
    }
