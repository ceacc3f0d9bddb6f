"""Error definitions for paramsfo."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_BAD_MAGIC = "E_BAD_MAGIC"
E_BAD_VERSION = "E_BAD_VERSION"
E_TRUNCATED = "E_TRUNCATED"
E_OFFSET_RANGE = "E_OFFSET_RANGE"
E_NON_MONOTONIC = "E_NON_MONOTONIC"
E_DATA_TYPE = "E_DATA_TYPE"
E_SIZE_MISMATCH = "E_SIZE_MISMATCH"
E_DUP_KEY = "E_DUP_KEY"
E_KEY = "E_KEY"
E_TEXT_DECODE = "E_TEXT_DECODE"
E_TEXT_ENCODING = "E_TEXT_ENCODING"
E_VALUE_RANGE = "E_VALUE_RANGE"
E_VALUE_TOO_LONG = "E_VALUE_TOO_LONG"
E_KEY_TABLE_OVERFLOW = "E_KEY_TABLE_OVERFLOW"
E_INTERNAL = "E_INTERNAL"


@dataclass
class SfoError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class FormatError(SfoError):
    """Input bytes do not describe a well formed SFO file."""


class EncodingError(SfoError):
    """A key or value cannot be represented in the SFO layout."""


def format_error(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> FormatError:
    return FormatError(code=code, message=message, context=context)


def encoding_error(
    code: str, message: str, context: Optional[Dict[str, Any]] = None
) -> EncodingError:
    return EncodingError(code=code, message=message, context=context)


def internal_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> SfoError:
    return SfoError(code=E_INTERNAL, message=message, context=context)


__all__ = [
    "SfoError",
    "FormatError",
    "EncodingError",
    "format_error",
    "encoding_error",
    "internal_error",
    "E_BAD_MAGIC",
    "E_BAD_VERSION",
    "E_TRUNCATED",
    "E_OFFSET_RANGE",
    "E_NON_MONOTONIC",
    "E_DATA_TYPE",
    "E_SIZE_MISMATCH",
    "E_DUP_KEY",
    "E_KEY",
    "E_TEXT_DECODE",
    "E_TEXT_ENCODING",
    "E_VALUE_RANGE",
    "E_VALUE_TOO_LONG",
    "E_KEY_TABLE_OVERFLOW",
    "E_INTERNAL",
]
