import pytest

from paramsfo.packing.codec import (
    pack_i32,
    pack_u16,
    pack_u32,
    splice,
    unpack_i32,
    unpack_u16,
    unpack_u32,
)
from paramsfo.packing.errors import EncodingError, FormatError


def test_little_endian_encoding():
    assert pack_u16(0x1234) == b"\x34\x12"
    assert pack_u32(0x12345678) == b"\x78\x56\x34\x12"
    assert pack_i32(42) == b"\x2a\x00\x00\x00"
    assert pack_i32(-1) == b"\xff\xff\xff\xff"


def test_decoding_at_offset():
    data = b"\xaa\x34\x12\x78\x56\x34\x12"
    assert unpack_u16(data, 1) == 0x1234
    assert unpack_u32(data, 3) == 0x12345678
    assert unpack_i32(b"\xfe\xff\xff\xff") == -2


@pytest.mark.parametrize(
    "packer,value",
    [
        (pack_u16, -1),
        (pack_u16, 0x10000),
        (pack_u32, 2**32),
        (pack_i32, 2**31),
        (pack_i32, -(2**31) - 1),
    ],
)
def test_out_of_range_values_rejected(packer, value):
    with pytest.raises(EncodingError) as exc:
        packer(value)
    assert exc.value.code == "E_VALUE_RANGE"


def test_short_input_is_format_error():
    with pytest.raises(FormatError) as exc:
        unpack_u32(b"\x01\x00", 0)
    assert exc.value.code == "E_TRUNCATED"
    with pytest.raises(FormatError):
        unpack_u16(b"\x01\x02", 1)


def test_splice_in_place():
    buf = bytearray(4)
    assert splice(buf, b"ab", 1) is buf
    assert bytes(buf) == b"\x00ab\x00"
    with pytest.raises(ValueError):
        splice(buf, b"abc", 2)
