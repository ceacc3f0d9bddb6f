"""Low-level layout helpers (alignment rules, slot padding)."""

from __future__ import annotations

import re
from typing import Optional

from .constants import (
    DATA_ALIGNMENT,
    TITLE_SLOT_SIZE,
    TITLE_ID_SLOT_SIZE,
    LICENSE_SLOT_SIZE,
)

__all__ = [
    "align_up",
    "fixed_slot_size",
    "resolve_length",
    "pad_to_size",
]

# TITLE plus the localized TITLE_00 .. TITLE_99 variants.
_TITLE_KEY = re.compile(r"TITLE(_[0-9]{2})?")


def align_up(value: int, alignment: int = DATA_ALIGNMENT) -> int:
    if value < 0:
        raise ValueError(f"Negative length: {value}")
    return (value + alignment - 1) // alignment * alignment


def fixed_slot_size(key: Optional[str]) -> Optional[int]:
    """Return the fixed value slot for ``key`` or None for ordinary keys."""
    if key is None:
        return None
    if _TITLE_KEY.fullmatch(key):
        return TITLE_SLOT_SIZE
    if key == "TITLE_ID":
        return TITLE_ID_SLOT_SIZE
    if key == "LICENSE":
        return LICENSE_SLOT_SIZE
    return None


def resolve_length(key: Optional[str], raw_length: int) -> int:
    """Padded size of a value of ``raw_length`` bytes stored under ``key``.

    Special keys get their fixed slot regardless of ``raw_length``; callers
    are responsible for values that do not fit it.
    """
    if raw_length < 0:
        raise ValueError(f"Negative length: {raw_length}")
    slot = fixed_slot_size(key)
    if slot is not None:
        return slot
    return align_up(raw_length, DATA_ALIGNMENT)


def pad_to_size(data: bytes, size: int) -> bytes:
    if len(data) > size:
        raise ValueError(f"Data larger than slot: {len(data)}>{size}")
    return data + b"\x00" * (size - len(data))
