"""Binary layout constants for PARAM.SFO files."""

from __future__ import annotations

MAGIC = b"\x00PSF"
VERSION = b"\x01\x01\x00\x00"

HEADER_SIZE = 20
INDEX_ENTRY_SIZE = 16

# Alignment byte stored in every index record and the default value padding.
DATA_ALIGNMENT = 4
KEY_TABLE_ALIGNMENT = 4

# Data-type tags (byte 3 of an index record).
DATA_TYPE_BINARY = 0x00
DATA_TYPE_STRING = 0x02
DATA_TYPE_NUMBER = 0x04

NUMBER_SIZE = 4

# Fixed value slots for special keys.
TITLE_SLOT_SIZE = 128
TITLE_ID_SLOT_SIZE = 16
LICENSE_SLOT_SIZE = 512

MAX_U16 = 0xFFFF
MAX_U32 = 0xFFFFFFFF
MIN_I32 = -(2**31)
MAX_I32 = 2**31 - 1

# Largest single read() issued to a source; declared sizes are never
# trusted for allocation.
READ_CHUNK_SIZE = 64 * 1024

__all__ = [
    "MAGIC",
    "VERSION",
    "HEADER_SIZE",
    "INDEX_ENTRY_SIZE",
    "DATA_ALIGNMENT",
    "KEY_TABLE_ALIGNMENT",
    "DATA_TYPE_BINARY",
    "DATA_TYPE_STRING",
    "DATA_TYPE_NUMBER",
    "NUMBER_SIZE",
    "TITLE_SLOT_SIZE",
    "TITLE_ID_SLOT_SIZE",
    "LICENSE_SLOT_SIZE",
    "MAX_U16",
    "MAX_U32",
    "MIN_I32",
    "MAX_I32",
    "READ_CHUNK_SIZE",
]
