"""Public interface for the import payload adapter."""

from __future__ import annotations

from .schema import ImportPayload, LocalePayload, MetaPayload, TermPayload
from .translator import (
    PayloadError,
    parse_import_unit,
    read_json_lines,
    unit_from_mapping,
)

__all__ = [
    "ImportPayload",
    "LocalePayload",
    "MetaPayload",
    "PayloadError",
    "TermPayload",
    "parse_import_unit",
    "read_json_lines",
    "unit_from_mapping",
]
