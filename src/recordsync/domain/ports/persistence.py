"""Ports for the content store primitives consumed by reconciliation.

Adapters raise :class:`~recordsync.domain.model.StoreError` (or a subclass) when a
primitive fails; the reconciliation stages decide whether that is fatal.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime, timedelta

    from recordsync.domain.model import RecordBody, RecordId, Term

type WriteHook = Callable[[dict[str, object]], dict[str, object]]


@runtime_checkable
class RecordStore(Protocol):
    """Record bodies and the identity index."""

    def create(self, body: RecordBody) -> RecordId: ...

    def update(self, record_id: RecordId, body: RecordBody) -> None: ...

    def get(self, record_id: RecordId) -> RecordBody | None: ...

    def find_by_index_key(self, key: str) -> Sequence[RecordId]: ...

    def add_write_hook(self, hook: WriteHook) -> None: ...

    def remove_write_hook(self, hook: WriteHook) -> None: ...


@runtime_checkable
class MetadataStore(Protocol):
    """Key/value metadata per record; ``set`` overwrites any previous value for the key."""

    def set(self, record_id: RecordId, key: str, value: object) -> None: ...

    def get(self, record_id: RecordId, key: str) -> object | None: ...


@runtime_checkable
class TaxonomyStore(Protocol):
    def find_term(self, taxonomy: str, slug: str) -> Term | None: ...

    def create_term(
        self,
        taxonomy: str,
        *,
        name: str,
        slug: str,
        parent_id: int | None = None,
        description: str | None = None,
    ) -> Term:
        """Create a term or raise ``TermConflictError`` if the slug exists."""
        ...

    def attach_term(self, record_id: RecordId, term_id: int, taxonomy: str) -> bool: ...


@runtime_checkable
class HoldingArea(Protocol):
    """Time-bounded storage of rejected unit snapshots for operator inspection."""

    def stash(self, key: str, snapshot: dict[str, object], ttl: timedelta) -> None: ...

    def get(self, key: str, *, now: datetime | None = None) -> dict[str, object] | None: ...

    def purge_expired(self, *, now: datetime | None = None) -> int: ...
