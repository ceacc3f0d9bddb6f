"""Document loading utilities (JSON/YAML) for paramsfo.

A document file holds an ``entries`` mapping. Scalar strings become STRING
values and integers NUMBER values; a mapping with a ``type`` field selects
the kind explicitly and, for binary values, names the data source.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from ..utils.io import read_value_data
from .models import SfoDocument, SfoValue, ValueKind

__all__ = ["load_document", "parse_document", "dump_document"]

_KIND_NAMES = {kind.name.lower(): kind for kind in ValueKind}


def load_document(path: str | Path) -> SfoDocument:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        data: Any = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Root of document must be an object")
    return parse_document(data, p.parent)


def _parse_typed(key: str, spec: Dict[str, Any], base_dir: Path) -> SfoValue:
    type_name = spec.get("type")
    if not isinstance(type_name, str) or type_name.lower() not in _KIND_NAMES:
        raise ValueError(
            f"entries.{key}.type must be one of {sorted(_KIND_NAMES)}"
        )
    kind = _KIND_NAMES[type_name.lower()]
    if kind is ValueKind.BINARY:
        return SfoValue.binary(read_value_data(spec, base_dir))
    value = spec.get("value")
    if kind is ValueKind.STRING:
        if not isinstance(value, str):
            raise ValueError(f"entries.{key}.value must be a string")
        return SfoValue.string(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"entries.{key}.value must be an integer")
    return SfoValue.number(value)


def parse_document(data: Dict[str, Any], base_dir: Path) -> SfoDocument:
    entries = data.get("entries", {})
    if not isinstance(entries, dict):
        raise ValueError("'entries' must be an object")
    document = SfoDocument()
    for key, spec in entries.items():
        if not isinstance(key, str):
            raise ValueError(f"Entry key must be a string: {key!r}")
        if isinstance(spec, dict):
            document[key] = _parse_typed(key, spec, base_dir)
        elif isinstance(spec, str) or (
            isinstance(spec, int) and not isinstance(spec, bool)
        ):
            document[key] = spec
        else:
            raise ValueError(
                f"entries.{key}: unsupported value {type(spec).__name__}"
            )
    return document


def dump_document(document: SfoDocument) -> Dict[str, Any]:
    """Inverse of :func:`parse_document`; binary values become ``data_hex``.

    Strings carrying trailing NULs (as platform tools write them) are dumped
    in the typed form with the NULs kept, so re-parsing gives the same bytes.
    """
    entries: Dict[str, Any] = {}
    for key, value in document.items():
        if value.kind is ValueKind.BINARY:
            entries[key] = {"type": "binary", "data_hex": value.data.hex()}
        elif value.kind is ValueKind.STRING and value.data.endswith(b"\x00"):
            text = value.data.decode("utf-8")
            entries[key] = {"type": "string", "value": text}
        else:
            entries[key] = value.to_python()
    return {"entries": entries}
