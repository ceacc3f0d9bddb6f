"""Alignment rule resolver tests.

Covers:
- fixed slots for TITLE / TITLE_nn / TITLE_ID / LICENSE
- 4-byte rounding for every other key (and for no key at all)
- keys that only look like special keys
"""

import pytest

from paramsfo.packing.layout import (
    align_up,
    fixed_slot_size,
    pad_to_size,
    resolve_length,
)


@pytest.mark.parametrize("raw", [0, 7, 127, 128])
def test_title_slot_is_fixed(raw):
    assert resolve_length("TITLE", raw) == 128


@pytest.mark.parametrize("key", ["TITLE_00", "TITLE_05", "TITLE_99"])
def test_localized_titles_share_title_slot(key):
    assert resolve_length(key, 3) == 128


def test_title_id_and_license_slots():
    assert resolve_length("TITLE_ID", 9) == 16
    assert resolve_length("LICENSE", 1) == 512


@pytest.mark.parametrize(
    "key", ["TITLE_1", "TITLE_123", "XTITLE", "TITLE_AB", "title", "TITLE_٠١"]
)
def test_lookalike_keys_use_default_rounding(key):
    assert fixed_slot_size(key) is None
    assert resolve_length(key, 5) == 8


@pytest.mark.parametrize(
    "raw,expected", [(0, 0), (1, 4), (3, 4), (4, 4), (5, 8), (511, 512)]
)
def test_default_rounding(raw, expected):
    assert resolve_length("APP_VER", raw) == expected
    assert resolve_length(None, raw) == expected


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        resolve_length("APP_VER", -1)
    with pytest.raises(ValueError):
        align_up(-4)


def test_pad_to_size():
    assert pad_to_size(b"ab", 4) == b"ab\x00\x00"
    assert pad_to_size(b"", 0) == b""
    with pytest.raises(ValueError):
        pad_to_size(b"abcde", 4)
