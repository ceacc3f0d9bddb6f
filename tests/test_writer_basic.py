import io
import struct

import pytest

from paramsfo.api import write_sfo, write_sfo_stream
from paramsfo.document.models import SfoDocument, SfoValue
from paramsfo.packing import writer
from paramsfo.packing.errors import EncodingError
from paramsfo.reporting import PlainReporter


def test_write_empty_document():
    data = write_sfo(SfoDocument())
    assert data == b"\x00PSF\x01\x01\x00\x00" + struct.pack("<III", 20, 20, 0)
    assert len(data) == 20


def test_write_title_scenario():
    doc = SfoDocument({"TITLE_ID": "ABCD12345", "TITLE": "My Game"})
    data = write_sfo(doc)
    key_off, value_off, count = struct.unpack_from("<III", data, 8)
    assert count == 2
    assert key_off == 20 + 2 * 16
    # "TITLE\0TITLE_ID\0" is 15 bytes, padded to 16.
    assert value_off == key_off + 16
    assert data[key_off:value_off] == b"TITLE\x00TITLE_ID\x00\x00"
    assert len(data) == value_off + 128 + 16

    # TITLE sorts first: key offset 0, value slot 128 bytes at offset 0.
    k0, align0, type0, raw0, pad0, voff0 = struct.unpack_from("<HBBIII", data, 20)
    assert (k0, align0, type0, raw0, pad0, voff0) == (0, 4, 2, 7, 128, 0)
    k1, align1, type1, raw1, pad1, voff1 = struct.unpack_from("<HBBIII", data, 36)
    assert (k1, align1, type1, raw1, pad1, voff1) == (6, 4, 2, 9, 16, 128)

    title_slot = data[value_off : value_off + 128]
    assert title_slot == b"My Game" + b"\x00" * 121
    title_id_slot = data[value_off + 128 : value_off + 144]
    assert title_id_slot == b"ABCD12345" + b"\x00" * 7


def test_write_number_is_little_endian():
    data = write_sfo(SfoDocument({"PARENTAL_LEVEL": 42}))
    _, value_off, _ = struct.unpack_from("<III", data, 8)
    assert data[value_off : value_off + 4] == b"\x2a\x00\x00\x00"
    assert data[20 + 3] == 0x04


def test_write_binary_tag_and_padding():
    data = write_sfo(SfoDocument({"BLOB": SfoValue.binary(b"\x01\x02\x03\x04\x05")}))
    _, value_off, _ = struct.unpack_from("<III", data, 8)
    _, _, dtype, raw, padded, _ = struct.unpack_from("<HBBIII", data, 20)
    assert (dtype, raw, padded) == (0x00, 5, 8)
    assert data[value_off:] == b"\x01\x02\x03\x04\x05\x00\x00\x00"


def test_write_is_order_independent():
    a = SfoDocument()
    a["B"] = 1
    a["A"] = "x"
    b = SfoDocument()
    b["A"] = "x"
    b["B"] = 1
    assert write_sfo(a) == write_sfo(b)


class _FailingSink(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        raise OSError("disk full")


def test_stream_errors_propagate():
    with pytest.raises(OSError, match="disk full"):
        write_sfo_stream(SfoDocument({"A": 1}), _FailingSink())


def test_stream_untouched_on_encoding_error():
    sink = io.BytesIO()
    doc = SfoDocument({"A": 1})
    doc[""] = "empty key"
    with pytest.raises(EncodingError):
        write_sfo_stream(doc, sink)
    assert sink.getvalue() == b""


def test_stream_receives_full_buffer():
    sink = io.BytesIO()
    doc = SfoDocument({"TITLE": "T", "VERSION": "01.00"})
    n = write_sfo_stream(doc, sink)
    assert sink.getvalue() == write_sfo(doc)
    assert n == len(sink.getvalue())


def test_failed_emission_closes_its_task(monkeypatch):
    buf = io.StringIO()
    rep = PlainReporter(stream=buf, use_color=False)
    monkeypatch.setattr("paramsfo.reporting.base._ACTIVE_REPORTER", rep)

    def broken(record):
        raise RuntimeError("cannot pack")

    monkeypatch.setattr(writer, "pack_index_entry", broken)
    with pytest.raises(RuntimeError, match="cannot pack"):
        write_sfo(SfoDocument({"TITLE": "My Game"}))
    assert rep._tasks == {}
    assert "✖ Index table 0/1" in buf.getvalue()
