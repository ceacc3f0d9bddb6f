"""In-memory model: tagged SFO values, entries and the ordered document."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..packing.codec import pack_i32, unpack_i32
from ..packing.constants import (
    DATA_TYPE_BINARY,
    DATA_TYPE_STRING,
    DATA_TYPE_NUMBER,
    NUMBER_SIZE,
)
from ..packing.errors import (
    E_SIZE_MISMATCH,
    E_TEXT_DECODE,
    E_TEXT_ENCODING,
    SfoError,
    encoding_error,
    format_error,
)
from ..packing.layout import resolve_length

__all__ = ["ValueKind", "SfoValue", "Entry", "SfoDocument"]


class ValueKind(IntEnum):
    """Value kinds, valued by their on-disk data-type tag."""

    BINARY = DATA_TYPE_BINARY
    STRING = DATA_TYPE_STRING
    NUMBER = DATA_TYPE_NUMBER


@dataclass(frozen=True, slots=True)
class SfoValue:
    kind: ValueKind
    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ValueKind):
            raise TypeError(f"kind must be a ValueKind, got {self.kind!r}")
        if not isinstance(self.data, bytes):
            raise TypeError(f"data must be bytes, got {type(self.data).__name__}")
        if self.kind is ValueKind.NUMBER and len(self.data) != NUMBER_SIZE:
            raise encoding_error(
                E_SIZE_MISMATCH,
                f"Number value must be {NUMBER_SIZE} bytes, got {len(self.data)}",
            )

    @classmethod
    def string(cls, text: str) -> "SfoValue":
        try:
            data = text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise encoding_error(
                E_TEXT_ENCODING,
                f"String value is not representable as UTF-8: {exc.reason}",
                {"start": exc.start, "end": exc.end},
            ) from exc
        return cls(ValueKind.STRING, data)

    @classmethod
    def number(cls, value: int) -> "SfoValue":
        return cls(ValueKind.NUMBER, pack_i32(value))

    @classmethod
    def binary(cls, data: bytes) -> "SfoValue":
        return cls(ValueKind.BINARY, bytes(data))

    @classmethod
    def coerce(cls, obj: Any) -> "SfoValue":
        if isinstance(obj, SfoValue):
            return obj
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, bool):
            raise TypeError("bool is not a valid SFO value")
        if isinstance(obj, int):
            return cls.number(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.binary(bytes(obj))
        raise TypeError(f"Unsupported SFO value type: {type(obj).__name__}")

    @property
    def raw_length(self) -> int:
        return len(self.data)

    def as_bytes(self) -> bytes:
        return self.data

    def as_text(self) -> str:
        # Platform tools store strings with a terminating NUL.
        try:
            return self.data.rstrip(b"\x00").decode("utf-8")
        except UnicodeDecodeError as exc:
            raise format_error(
                E_TEXT_DECODE, f"Value is not valid UTF-8: {exc.reason}"
            ) from exc

    def as_int(self) -> int:
        return unpack_i32(self.data)

    def to_python(self) -> Any:
        if self.kind is ValueKind.STRING:
            return self.as_text()
        if self.kind is ValueKind.NUMBER:
            return self.as_int()
        return self.data


@dataclass(frozen=True, slots=True)
class Entry:
    key: str
    value: SfoValue

    @property
    def raw_length(self) -> int:
        return self.value.raw_length

    @property
    def padded_length(self) -> int:
        return resolve_length(self.key, self.raw_length)


class SfoDocument(MutableMapping):
    """Ordered key/value collection exchanged with the reader and writer.

    Iteration is always in ascending key order, which is also the order the
    writer lays entries out in. Plain ``str``/``int``/``bytes`` values are
    coerced to :class:`SfoValue` on assignment.
    """

    def __init__(self, items: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        self._values: Dict[str, SfoValue] = {}
        if items is not None:
            self.update(items)
        if kwargs:
            self.update(kwargs)

    def __getitem__(self, key: str) -> SfoValue:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"SFO keys must be str, got {type(key).__name__}")
        self._values[key] = SfoValue.coerce(value)

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SfoDocument):
            return self._values == other._values
        if isinstance(other, Mapping):
            try:
                return self == SfoDocument(other)
            except (TypeError, SfoError):
                return False
        return NotImplemented

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {self._values[k]!r}" for k in self)
        return f"SfoDocument({{{body}}})"

    def entries(self) -> List[Entry]:
        return [Entry(key, self._values[key]) for key in self]

    def to_python(self) -> Dict[str, Any]:
        return {key: self._values[key].to_python() for key in self}
