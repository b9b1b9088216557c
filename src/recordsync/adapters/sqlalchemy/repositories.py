"""Store implementations backed by SQLAlchemy sessions.

Every write runs inside a SAVEPOINT, so a failed secondary write leaves the
already-flushed record body (and the rest of the transaction) intact.
SQLAlchemy errors are re-raised as :class:`StoreError`.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from recordsync.adapters.sqlalchemy.mappings import (
    held_snapshot_table,
    record_meta_table,
    record_term_table,
    term_table,
)
from recordsync.domain.model import Record, RecordBody, StoreError, Term, TermConflictError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import timedelta

    from sqlalchemy.orm import Session

    from recordsync.domain.model import RecordId
    from recordsync.domain.ports import WriteHook


class SqlAlchemyRecordStore:
    def __init__(self, session: Session) -> None:
        self.session = session
        self._write_hooks: list[WriteHook] = []

    def add_write_hook(self, hook: WriteHook) -> None:
        self._write_hooks.append(hook)

    def remove_write_hook(self, hook: WriteHook) -> None:
        if hook in self._write_hooks:
            self._write_hooks.remove(hook)

    def create(self, body: RecordBody) -> RecordId:
        record = Record()
        record.apply(self._prepare(body))
        try:
            with self.session.begin_nested():
                self.session.add(record)
                self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not create record: {exc}") from exc
        if record.id is None:
            raise StoreError("Record store did not assign an id")
        return record.id

    def update(self, record_id: RecordId, body: RecordBody) -> None:
        record = self._load(record_id)
        if record is None:
            raise StoreError(f"Record {record_id} does not exist")
        try:
            with self.session.begin_nested():
                record.apply(self._prepare(body))
                self.session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not update record {record_id}: {exc}") from exc

    def get(self, record_id: RecordId) -> RecordBody | None:
        record = self._load(record_id)
        if record is None:
            return None
        return record.to_body()

    def find_by_index_key(self, key: str) -> Sequence[RecordId]:
        stmt = (
            select(record_meta_table.c.record_id)
            .where(record_meta_table.c.key == key)
            .order_by(record_meta_table.c.record_id)
        )
        try:
            return list(dict.fromkeys(self.session.execute(stmt).scalars()))
        except SQLAlchemyError as exc:
            raise StoreError(f"Index lookup for {key!r} failed: {exc}") from exc

    def _load(self, record_id: RecordId) -> Record | None:
        try:
            return self.session.get(Record, record_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load record {record_id}: {exc}") from exc

    def _prepare(self, body: RecordBody) -> RecordBody:
        row = body.provided()
        for hook in self._write_hooks:
            row = hook(row)
        return RecordBody.from_fields(row)


class SqlAlchemyMetadataStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def set(self, record_id: RecordId, key: str, value: object) -> None:
        existing = select(record_meta_table.c.id).where(
            record_meta_table.c.record_id == record_id,
            record_meta_table.c.key == key,
        )
        try:
            with self.session.begin_nested():
                meta_id = self.session.execute(existing).scalar_one_or_none()
                if meta_id is None:
                    self.session.execute(
                        record_meta_table.insert().values(
                            record_id=record_id, key=key, value=value
                        )
                    )
                else:
                    self.session.execute(
                        update(record_meta_table)
                        .where(record_meta_table.c.id == meta_id)
                        .values(value=value)
                    )
        except (SQLAlchemyError, TypeError) as exc:
            raise StoreError(f"Could not write metadata {key!r} on {record_id}: {exc}") from exc

    def get(self, record_id: RecordId, key: str) -> object | None:
        stmt = select(record_meta_table.c.value).where(
            record_meta_table.c.record_id == record_id,
            record_meta_table.c.key == key,
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read metadata {key!r} on {record_id}: {exc}") from exc


class SqlAlchemyTaxonomyStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_term(self, taxonomy: str, slug: str) -> Term | None:
        stmt = select(Term).where(term_table.c.taxonomy == taxonomy, term_table.c.slug == slug)
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Term lookup {taxonomy}/{slug} failed: {exc}") from exc

    def create_term(
        self,
        taxonomy: str,
        *,
        name: str,
        slug: str,
        parent_id: int | None = None,
        description: str | None = None,
    ) -> Term:
        term = Term(
            taxonomy=taxonomy,
            slug=slug,
            name=name,
            description=description or "",
            parent_id=parent_id,
        )
        try:
            with self.session.begin_nested():
                self.session.add(term)
                self.session.flush()
        except IntegrityError as exc:
            raise TermConflictError(taxonomy, slug) from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not create term {taxonomy}/{slug}: {exc}") from exc
        return term

    def attach_term(self, record_id: RecordId, term_id: int, taxonomy: str) -> bool:
        try:
            term = self.session.get(Term, term_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load term {term_id}: {exc}") from exc
        if term is None or term.taxonomy != taxonomy:
            return False
        existing = select(record_term_table.c.term_id).where(
            record_term_table.c.record_id == record_id,
            record_term_table.c.term_id == term_id,
        )
        try:
            with self.session.begin_nested():
                if self.session.execute(existing).first() is None:
                    self.session.execute(
                        record_term_table.insert().values(
                            record_id=record_id, term_id=term_id, taxonomy=taxonomy
                        )
                    )
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not attach term {term_id} to {record_id}: {exc}") from exc
        return True

    def terms_for(self, record_id: RecordId, taxonomy: str) -> list[Term]:
        stmt = (
            select(Term)
            .join(record_term_table, record_term_table.c.term_id == term_table.c.id)
            .where(
                record_term_table.c.record_id == record_id,
                record_term_table.c.taxonomy == taxonomy,
            )
            .order_by(term_table.c.id)
        )
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not list {taxonomy} terms of {record_id}: {exc}") from exc


class SqlAlchemyHoldingArea:
    def __init__(self, session: Session) -> None:
        self.session = session

    def stash(self, key: str, snapshot: dict[str, object], ttl: timedelta) -> None:
        now = datetime.now(tz=UTC)
        payload = cast("dict[str, object]", json.loads(json.dumps(snapshot, default=str)))
        try:
            with self.session.begin_nested():
                self.session.execute(
                    delete(held_snapshot_table).where(held_snapshot_table.c.key == key)
                )
                self.session.execute(
                    held_snapshot_table.insert().values(
                        key=key, payload=payload, created_at=now, expires_at=now + ttl
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not stash snapshot {key!r}: {exc}") from exc

    def get(self, key: str, *, now: datetime | None = None) -> dict[str, object] | None:
        moment = now or datetime.now(tz=UTC)
        stmt = select(held_snapshot_table.c.payload).where(
            held_snapshot_table.c.key == key,
            held_snapshot_table.c.expires_at > moment,
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read snapshot {key!r}: {exc}") from exc

    def purge_expired(self, *, now: datetime | None = None) -> int:
        moment = now or datetime.now(tz=UTC)
        stmt = delete(held_snapshot_table).where(held_snapshot_table.c.expires_at <= moment)
        try:
            result = self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not purge expired snapshots: {exc}") from exc
        return result.rowcount or 0


if TYPE_CHECKING:
    from recordsync.domain.ports import HoldingArea, MetadataStore, RecordStore, TaxonomyStore

    _session_stub = cast("Session", object())
    _record_check: RecordStore = SqlAlchemyRecordStore(_session_stub)
    _meta_check: MetadataStore = SqlAlchemyMetadataStore(_session_stub)
    _taxonomy_check: TaxonomyStore = SqlAlchemyTaxonomyStore(_session_stub)
    _holding_check: HoldingArea = SqlAlchemyHoldingArea(_session_stub)
