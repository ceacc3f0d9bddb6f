from __future__ import annotations

"""Planner layout tests.

Covers:
- header/table offsets derived from counts and key lengths
- running key/value offset accumulation
- padding accounting
- representability checks raised before any byte is emitted
"""

import json

import pytest

from paramsfo.api import plan_dry_run
from paramsfo.document.models import SfoDocument
from paramsfo.packing.constants import HEADER_SIZE, INDEX_ENTRY_SIZE
from paramsfo.packing.errors import EncodingError
from paramsfo.packing.planner import WriteOptions, compute_sfo_plan


def _doc() -> SfoDocument:
    return SfoDocument({"TITLE": "Game", "CATEGORY": "DG", "APP_VER": "01.00"})


def test_planner_offsets():  # noqa: N802
    plan = compute_sfo_plan(_doc())
    keys = [e.key for e in plan.entries]
    assert keys == ["APP_VER", "CATEGORY", "TITLE"]
    assert [e.record.key_offset for e in plan.entries] == [0, 8, 17]
    assert [e.record.value_offset for e in plan.entries] == [0, 8, 12]
    assert [e.record.raw_size for e in plan.entries] == [5, 2, 4]
    assert [e.record.padded_size for e in plan.entries] == [8, 4, 128]
    assert plan.header.entry_count == 3
    assert plan.header.key_table_offset == HEADER_SIZE + 3 * INDEX_ENTRY_SIZE
    assert plan.key_table.size == 24
    assert plan.key_table.padding_after == 1
    assert plan.header.value_table_offset == 68 + 24
    assert plan.value_table.size == 140
    assert plan.file_size == 232


def test_planner_padding_accounting():  # noqa: N802
    plan, plan_dict = plan_dry_run(_doc())
    pad = plan_dict["padding"]
    assert pad["total"] == sum(pad["by_section"].values())
    assert pad["by_section"] == {"key_table": 1, "value_table": 3 + 2 + 124}
    assert plan_dict["file_size"] == plan.file_size
    json.dumps(plan_dict)
    assert [e["kind"] for e in plan_dict["entries"]] == ["string"] * 3


def test_planner_header_invariants_hold():  # noqa: N802
    doc = SfoDocument({f"KEY_{i:02d}": "v" * i for i in range(20)})
    plan = compute_sfo_plan(doc)
    assert plan.header.key_table_offset == 20 + 16 * plan.header.entry_count
    assert (
        plan.header.value_table_offset
        == plan.header.key_table_offset + plan.key_table.size
    )
    assert plan.key_table.size % 4 == 0
    for prev, cur in zip(plan.entries, plan.entries[1:]):
        assert cur.record.value_offset == (
            prev.record.value_offset + prev.record.padded_size
        )
        assert cur.record.key_offset == (
            prev.record.key_offset + len(prev.key_bytes) + 1
        )
    for e in plan.entries:
        assert e.record.padded_size >= e.record.raw_size
        assert e.record.padded_size % 4 == 0


def test_planner_empty_document():  # noqa: N802
    plan = compute_sfo_plan(SfoDocument())
    assert plan.entries == []
    assert plan.header.key_table_offset == 20
    assert plan.header.value_table_offset == 20
    assert plan.file_size == 20
    assert plan.padding.total == 0


@pytest.mark.parametrize("key", ["", "BAD\x00KEY", "BAD\ud800"])
def test_planner_rejects_bad_keys(key):  # noqa: N802
    doc = SfoDocument()
    doc[key] = 1
    with pytest.raises(EncodingError) as exc:
        compute_sfo_plan(doc)
    assert exc.value.code == "E_KEY"


def test_planner_key_table_overflow():  # noqa: N802
    doc = SfoDocument({f"K{i:03d}" + "X" * 996: 1 for i in range(70)})
    with pytest.raises(EncodingError) as exc:
        compute_sfo_plan(doc)
    assert exc.value.code == "E_KEY_TABLE_OVERFLOW"


def test_write_options_validation():  # noqa: N802
    assert WriteOptions().oversize == "reject"
    with pytest.raises(ValueError):
        WriteOptions(oversize="ignore")
