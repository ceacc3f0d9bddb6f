from .models import ValueKind, SfoValue, Entry, SfoDocument
from .loader import load_document, parse_document, dump_document

__all__ = [
    "ValueKind",
    "SfoValue",
    "Entry",
    "SfoDocument",
    "load_document",
    "parse_document",
    "dump_document",
]
