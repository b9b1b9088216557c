"""Taxonomy term references and stored terms."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class TermRef:
    """A term as named by the source system; resolved by slug within its taxonomy."""

    name: str
    slug: str
    parent_slug: str | None = None
    description: str | None = None


@dataclass(eq=False, kw_only=True)
class Term:
    """A term as owned by the taxonomy store. ``slug`` is unique per taxonomy."""

    id: int | None = None
    taxonomy: str
    slug: str
    name: str
    description: str = ""
    parent_id: int | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None
