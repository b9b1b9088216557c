"""The staged, not-yet-validated import unit."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

from .errors import ScopedErrors
from .record import RecordBody, RecordId

if TYPE_CHECKING:
    from .enums import ErrorScope
    from .locale import LocaleInfo
    from .taxonomy import TermRef


@dataclass(frozen=True, slots=True)
class MetaEntry:
    key: str
    value: object


@dataclass(eq=False, kw_only=True)
class ImportUnit:
    """One external record staged for reconciliation.

    ``external_id`` is fixed at construction. ``internal_id`` is filled by identity
    resolution and only becomes authoritative once a save succeeds. A unit lives
    for a single reconciliation call and is never reused.
    """

    external_id: str
    internal_id: RecordId | None = None
    body: RecordBody = field(default_factory=RecordBody)
    metadata: list[MetaEntry] = field(default_factory=list["MetaEntry"])
    taxonomies: dict[str, list[TermRef]] = field(default_factory=dict["str", "list[TermRef]"])
    locale: LocaleInfo | None = None
    errors: ScopedErrors = field(default_factory=ScopedErrors)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "external_id" and "external_id" in self.__dict__:
            raise AttributeError("external_id is immutable once the unit is constructed")
        super().__setattr__(name, value)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def is_new(self) -> bool:
        return self.internal_id is None

    def add_meta(self, key: str, value: object) -> None:
        self.metadata.append(MetaEntry(key, value))

    def add_terms(self, taxonomy: str, *terms: TermRef) -> None:
        self.taxonomies.setdefault(taxonomy, []).extend(terms)

    def add_error(self, scope: ErrorScope, key: str, message: str) -> None:
        self.errors.add(scope, key, message)

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serialisable copy of the full staged state."""

        return {
            "external_id": self.external_id,
            "internal_id": self.internal_id,
            "body": self.body.provided(),
            "metadata": [{"key": entry.key, "value": entry.value} for entry in self.metadata],
            "taxonomies": {
                taxonomy: [asdict(term) for term in terms]
                for taxonomy, terms in self.taxonomies.items()
            },
            "locale": asdict(self.locale) if self.locale is not None else None,
            "errors": self.errors.as_dict(),
        }
