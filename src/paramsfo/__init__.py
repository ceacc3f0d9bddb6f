"""paramsfo package

Reader and writer for PARAM.SFO, the key/value metadata container found in
PlayStation game and application bundles.

Typical use::

    from paramsfo import SfoDocument, write_sfo, read_sfo_bytes

    doc = SfoDocument({"TITLE": "My Game", "TITLE_ID": "ABCD12345"})
    data = write_sfo(doc)
    assert read_sfo_bytes(data) == doc
"""

from .api import (
    WriteOptions,
    write_sfo,
    write_sfo_stream,
    read_sfo,
    read_sfo_bytes,
    save_sfo,
    load_sfo,
    build_sfo,
    plan_dry_run,
    inspect_sfo,
    validate_sfo,
)
from .document.models import ValueKind, SfoValue, Entry, SfoDocument
from .packing.errors import SfoError, FormatError, EncodingError

__all__ = [
    "WriteOptions",
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
    "ValueKind",
    "SfoValue",
    "Entry",
    "SfoDocument",
    "SfoError",
    "FormatError",
    "EncodingError",
]

__version__ = "0.1.0"
