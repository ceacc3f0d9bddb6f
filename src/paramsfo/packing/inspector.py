"""Random-access SFO inspection utilities.

Public functions:
- inspect_sfo(data) -> dict
- validate_sfo(info) -> list[str]

Unlike :mod:`.reader`, inspection never raises on layout inconsistencies
past the header; it records what the file declares so ``validate_sfo`` can
list every violated invariant at once.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from .constants import (
    DATA_ALIGNMENT,
    HEADER_SIZE,
    INDEX_ENTRY_SIZE,
    KEY_TABLE_ALIGNMENT,
)
from .layout import fixed_slot_size
from .packers import unpack_header, unpack_index_entry

__all__ = ["inspect_sfo", "validate_sfo"]


def _read_key(data: bytes, start: int, limit: int) -> str | None:
    if start >= limit:
        return None
    end = data.find(b"\x00", start, limit)
    if end == -1:
        return None
    return data[start:end].decode("utf-8", errors="replace")


def inspect_sfo(data: bytes) -> Dict[str, Any]:
    header = unpack_header(data)
    key_base = header.key_table_offset
    value_base = header.value_table_offset
    entries: List[Dict[str, Any]] = []
    for i in range(header.entry_count):
        off = HEADER_SIZE + i * INDEX_ENTRY_SIZE
        if off + INDEX_ENTRY_SIZE > len(data):
            break
        record = unpack_index_entry(data[off : off + INDEX_ENTRY_SIZE])
        entry = asdict(record)
        entry["key"] = _read_key(
            data, key_base + record.key_offset, min(value_base, len(data))
        )
        entries.append(entry)
    return {
        "file_size": len(data),
        "header": asdict(header),
        "index_table": {
            "offset": HEADER_SIZE,
            "size": header.entry_count * INDEX_ENTRY_SIZE,
        },
        "key_table": {"offset": key_base, "size": value_base - key_base},
        "value_table": {
            "offset": value_base,
            "size": len(data) - value_base,
        },
        "entries": entries,
    }


def validate_sfo(info: Dict[str, Any]) -> List[str]:
    issues: List[str] = []
    header = info["header"]
    count = header["entry_count"]
    entries = info["entries"]
    if len(entries) != count:
        issues.append(f"Index table truncated: {len(entries)}/{count} records")
    if header["key_table_offset"] != HEADER_SIZE + count * INDEX_ENTRY_SIZE:
        issues.append("Key table does not follow index table")
    key_size = info["key_table"]["size"]
    if key_size < 0:
        issues.append("Value table starts before key table")
    elif key_size % KEY_TABLE_ALIGNMENT:
        issues.append("Key table size not 4-byte aligned")

    prev = None
    for i, e in enumerate(entries):
        label = e["key"] if e["key"] is not None else f"#{i}"
        if e["key"] is None:
            issues.append(f"Entry {label}: key not readable")
        if e["alignment"] != DATA_ALIGNMENT:
            issues.append(f"Entry {label}: alignment byte {e['alignment']}")
        if e["padded_size"] < e["raw_size"]:
            issues.append(f"Entry {label}: raw size exceeds padded size")
        slot = fixed_slot_size(e["key"])
        if slot is not None:
            if e["padded_size"] != slot:
                issues.append(
                    f"Entry {label}: slot {e['padded_size']} expected {slot}"
                )
        elif e["padded_size"] % DATA_ALIGNMENT:
            issues.append(f"Entry {label}: padded size not 4-byte aligned")
        if prev is None:
            if e["key_offset"] != 0 or e["value_offset"] != 0:
                issues.append(f"Entry {label}: first offsets not zero")
        else:
            prev_key_len = len((prev["key"] or "").encode("utf-8"))
            if e["key_offset"] != prev["key_offset"] + prev_key_len + 1:
                issues.append(f"Entry {label}: key offset not contiguous")
            if e["value_offset"] != prev["value_offset"] + prev["padded_size"]:
                issues.append(f"Entry {label}: value offset not contiguous")
        prev = e

    value_end = header["value_table_offset"] + (
        entries[-1]["value_offset"] + entries[-1]["padded_size"]
        if entries
        else 0
    )
    if value_end != info["file_size"]:
        issues.append(
            f"File size {info['file_size']} does not match layout end {value_end}"
        )
    return issues
