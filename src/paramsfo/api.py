"""High-level API for paramsfo.

Thin wrappers that open files with scoped ``with`` blocks around the stream
based reader and writer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from .document.loader import load_document
from .document.models import SfoDocument
from .logging import get_logger, step
from .packing.inspector import (
    inspect_sfo as _inspect_sfo_impl,
    validate_sfo as _validate_sfo_impl,
)
from .packing.planner import SfoPlan, WriteOptions, compute_sfo_plan, to_plan_dict
from .packing.reader import read_sfo, read_sfo_bytes
from .packing.writer import write_sfo, write_sfo_stream

__all__ = [
    "WriteOptions",
    "SfoPlan",
    "write_sfo",
    "write_sfo_stream",
    "read_sfo",
    "read_sfo_bytes",
    "save_sfo",
    "load_sfo",
    "build_sfo",
    "plan_dry_run",
    "inspect_sfo",
    "validate_sfo",
]


def save_sfo(
    document: SfoDocument,
    path: str | Path,
    options: Optional[WriteOptions] = None,
) -> int:
    """Write ``document`` to ``path``; returns the number of bytes written.

    The file is only created once the whole buffer has been built, so an
    encoding failure leaves no file behind.
    """
    data = write_sfo(document, options)
    with Path(path).open("wb") as f:
        f.write(data)
    return len(data)


def load_sfo(path: str | Path) -> SfoDocument:
    with Path(path).open("rb") as f:
        return read_sfo(f)


def build_sfo(
    document_path: str | Path,
    output_path: str | Path,
    options: Optional[WriteOptions] = None,
) -> int:
    """Load a JSON/YAML document description and write it as an SFO file."""
    logger = get_logger()
    document = load_document(document_path)
    step(f"Loaded {len(document)} entries from {Path(document_path).name}")
    size = save_sfo(document, output_path, options)
    logger.info(
        "Built SFO: %s (%d bytes, entries=%d)",
        Path(output_path).name,
        size,
        len(document),
    )
    return size


def plan_dry_run(
    document: SfoDocument, options: Optional[WriteOptions] = None
) -> tuple[SfoPlan, dict[str, Any]]:
    """Compute the layout of ``document`` without emitting bytes.

    Returns (SfoPlan, plan_dict) where plan_dict is JSON-serialisable.
    """
    plan = compute_sfo_plan(document, options)
    return plan, to_plan_dict(plan)


def inspect_sfo(path: str | Path) -> dict:
    return _inspect_sfo_impl(Path(path).read_bytes())


def validate_sfo(path: str | Path) -> list[str]:
    return _validate_sfo_impl(inspect_sfo(path))
