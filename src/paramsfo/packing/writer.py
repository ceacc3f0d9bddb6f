"""Binary writer emitting an SFO file from a :class:`SfoPlan`.

The writer consumes the plan produced by :func:`compute_sfo_plan` and only
concatenates bytes. Every section start and size is checked against the
plan; a divergence raises ``E_INTERNAL``. The whole file is assembled in
memory before anything reaches the caller's sink.
"""

from __future__ import annotations

from typing import BinaryIO, Optional

from ..document.models import SfoDocument
from ..logging import get_logger, section
from ..reporting import task
from .errors import internal_error
from .packers import (
    pack_header,
    pack_index_entry,
    pack_key_table,
    pack_value_slot,
)
from .planner import SfoPlan, TablePlan, WriteOptions, compute_sfo_plan

__all__ = ["write_sfo", "write_sfo_stream", "emit_plan"]


def _pad_to(buf: bytearray, target_offset: int) -> None:
    """Append zero padding until ``buf`` reaches ``target_offset``."""
    pos = len(buf)
    if pos > target_offset:
        raise internal_error(
            f"Writer position {pos} surpassed planned offset {target_offset}"
        )
    if pos < target_offset:
        buf.extend(b"\x00" * (target_offset - pos))


def _check_table(buf: bytearray, table: TablePlan) -> None:
    written = len(buf) - table.offset
    if written != table.size:
        raise internal_error(
            f"{table.name.title()} table size mismatch: plan={table.size} written={written}"
        )


def emit_plan(plan: SfoPlan) -> bytes:
    """Assemble header, index, key and value tables exactly as planned."""
    count = len(plan.entries)
    buf = bytearray()
    buf += pack_header(
        plan.header.key_table_offset,
        plan.header.value_table_offset,
        plan.header.entry_count,
    )

    _pad_to(buf, plan.index_table.offset)
    with task(
        "write.index",
        "Index table",
        total=count,
        entries=count,
        bytes=plan.index_table.size,
    ) as rep:
        for entry in plan.entries:
            buf += pack_index_entry(entry.record)
            rep.advance("write.index", current_item=entry.key)
        _check_table(buf, plan.index_table)

    _pad_to(buf, plan.key_table.offset)
    buf += pack_key_table(e.key_bytes for e in plan.entries)
    _check_table(buf, plan.key_table)

    with task(
        "write.values",
        "Value table",
        total=count,
        entries=count,
        bytes=plan.value_table.size,
    ) as rep:
        for entry in plan.entries:
            _pad_to(buf, plan.value_table.offset + entry.record.value_offset)
            buf += pack_value_slot(entry.value.data, entry.record.padded_size)
            rep.advance("write.values", current_item=entry.key)
        _check_table(buf, plan.value_table)

    if len(buf) != plan.file_size:
        raise internal_error(
            f"File size mismatch vs plan: plan={plan.file_size} actual={len(buf)}"
        )
    return bytes(buf)


def write_sfo(
    document: SfoDocument, options: Optional[WriteOptions] = None
) -> bytes:
    """Serialize ``document`` and return the complete file contents."""
    logger = get_logger()
    with section("Write SFO"):
        plan = compute_sfo_plan(document, options)
        data = emit_plan(plan)
    logger.info(
        "Wrote SFO size=%d bytes entries=%d padding=%d",
        len(data),
        plan.header.entry_count,
        plan.padding.total,
    )
    return data


def write_sfo_stream(
    document: SfoDocument,
    sink: BinaryIO,
    options: Optional[WriteOptions] = None,
) -> int:
    """Serialize ``document`` into ``sink`` with a single write call.

    Encoding problems surface before ``sink`` is touched. Errors raised by
    the sink propagate unchanged.
    """
    data = write_sfo(document, options)
    sink.write(data)
    return len(data)
