"""Locale membership of an import unit."""

from __future__ import annotations

from dataclasses import dataclass

from .record import RecordId

type TranslationGroup = dict[str, RecordId]
"""Locale code -> record id; each locale maps to at most one record."""


@dataclass(frozen=True, slots=True, kw_only=True)
class LocaleInfo:
    locale: str
    master_external_id: str | None = None

    @property
    def has_master(self) -> bool:
        return bool(self.master_external_id and self.master_external_id.strip())
