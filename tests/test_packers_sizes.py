import pytest

from paramsfo.document.models import SfoDocument, SfoValue
from paramsfo.packing.constants import HEADER_SIZE, INDEX_ENTRY_SIZE
from paramsfo.packing.errors import FormatError
from paramsfo.packing.packers import (
    IndexRecord,
    SfoHeader,
    next_index_record,
    pack_header,
    pack_index_entry,
    pack_key_table,
    pack_value_slot,
    unpack_header,
    unpack_index_entry,
)
from paramsfo.packing.planner import compute_sfo_plan


def test_header_layout():
    raw = pack_header(52, 68, 2)
    assert len(raw) == HEADER_SIZE
    assert raw[0:4] == b"\x00PSF"
    assert raw[4:8] == b"\x01\x01\x00\x00"
    assert raw[8:12] == b"\x34\x00\x00\x00"
    assert raw[12:16] == b"\x44\x00\x00\x00"
    assert raw[16:20] == b"\x02\x00\x00\x00"
    assert unpack_header(raw) == SfoHeader(52, 68, 2)


def test_header_rejects_bad_magic_and_version():
    raw = bytearray(pack_header(20, 20, 0))
    raw[1] = ord("X")
    with pytest.raises(FormatError) as exc:
        unpack_header(bytes(raw))
    assert exc.value.code == "E_BAD_MAGIC"
    raw = bytearray(pack_header(20, 20, 0))
    raw[5] = 0x02
    with pytest.raises(FormatError) as exc:
        unpack_header(bytes(raw))
    assert exc.value.code == "E_BAD_VERSION"
    with pytest.raises(FormatError) as exc:
        unpack_header(b"\x00PSF")
    assert exc.value.code == "E_TRUNCATED"


def test_index_entry_layout():
    record = IndexRecord(
        key_offset=6,
        alignment=4,
        data_type=2,
        raw_size=9,
        padded_size=16,
        value_offset=128,
    )
    raw = pack_index_entry(record)
    assert len(raw) == INDEX_ENTRY_SIZE
    assert raw == bytes.fromhex("0600 04 02 09000000 10000000 80000000")
    assert unpack_index_entry(raw) == record
    with pytest.raises(FormatError):
        unpack_index_entry(raw[:15])


def test_next_index_record_chains_offsets():
    first = next_index_record(None, b"", "TITLE", SfoValue.string("My Game"))
    assert (first.key_offset, first.value_offset) == (0, 0)
    assert (first.raw_size, first.padded_size) == (7, 128)
    second = next_index_record(
        first, b"TITLE", "TITLE_ID", SfoValue.string("ABCD12345")
    )
    assert second.key_offset == 0 + len(b"TITLE") + 1
    assert second.value_offset == 128
    assert (second.raw_size, second.padded_size, second.data_type) == (9, 16, 2)


def test_planner_records_chain_offsets():
    doc = SfoDocument(
        {
            "APP_VER": "01.00",
            "ATTRIBUTE": 0,
            "BOOTABLE": 1,
            "CATEGORY": "HG",
            "ICON_DATA": b"\x01\x02\x03",
            "LICENSE": "Some license text",
            "TITLE": "My Game",
            "TITLE_ID": "ABCD12345",
        }
    )
    plan = compute_sfo_plan(doc)
    first = plan.entries[0].record
    assert (first.key_offset, first.value_offset) == (0, 0)
    for prev, cur in zip(plan.entries, plan.entries[1:]):
        assert cur.record.key_offset == (
            prev.record.key_offset + len(prev.key_bytes) + 1
        )
        assert cur.record.value_offset == (
            prev.record.value_offset + prev.record.padded_size
        )
    last = plan.entries[-1]
    assert plan.value_table.size == (
        last.record.value_offset + last.record.padded_size
    )
    slots = {e.key: e.record.padded_size for e in plan.entries}
    assert (slots["LICENSE"], slots["TITLE"], slots["TITLE_ID"]) == (512, 128, 16)
    assert slots["ICON_DATA"] == 4


def test_key_table_is_padded_as_a_whole():
    assert pack_key_table([]) == b""
    assert pack_key_table([b"TITLE", b"TITLE_ID"]) == b"TITLE\x00TITLE_ID\x00\x00"
    assert len(pack_key_table([b"ABC"])) == 4


def test_value_slot():
    assert pack_value_slot(b"My Game", 128) == b"My Game" + b"\x00" * 121
    assert pack_value_slot(b"", 0) == b""
