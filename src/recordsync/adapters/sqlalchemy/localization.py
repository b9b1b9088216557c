"""Translation groups stored alongside the records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import SQLAlchemyError

from recordsync.adapters.sqlalchemy.mappings import record_locale_table, translation_group_table
from recordsync.domain.model import StoreError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.orm import Session

    from recordsync.domain.model import RecordId, TranslationGroup


class SqlAlchemyLocaleCollaborator:
    """Locale collaborator keeping groups in ``translation_group`` rows.

    A group is the set of rows sharing one ``anchor_id``; a record belongs to at
    most one group and a locale appears at most once per group.
    """

    name = "translation-groups"

    def __init__(
        self,
        session: Session,
        *,
        languages: Sequence[str] = (),
        active: bool = True,
    ) -> None:
        self.session = session
        self._languages = tuple(languages)
        self._active = active

    def is_active(self) -> bool:
        return self._active

    def languages(self) -> tuple[str, ...]:
        return self._languages

    def set_record_locale(self, record_id: RecordId, locale: str) -> None:
        try:
            with self.session.begin_nested():
                self.session.execute(
                    delete(record_locale_table).where(record_locale_table.c.record_id == record_id)
                )
                self.session.execute(
                    record_locale_table.insert().values(record_id=record_id, locale=locale)
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not set locale of record {record_id}: {exc}") from exc

    def get_record_locale(self, record_id: RecordId) -> str | None:
        stmt = select(record_locale_table.c.locale).where(
            record_locale_table.c.record_id == record_id
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read locale of record {record_id}: {exc}") from exc

    def get_translation_group(self, anchor_id: RecordId) -> TranslationGroup:
        try:
            group_anchor = self._group_anchor(anchor_id)
            stmt = select(
                translation_group_table.c.locale, translation_group_table.c.record_id
            ).where(translation_group_table.c.anchor_id == group_anchor)
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read translation group of {anchor_id}: {exc}") from exc
        return {locale: record_id for locale, record_id in rows}

    def save_translation_group(
        self,
        anchor_id: RecordId,
        group: Mapping[str, RecordId],
    ) -> None:
        members = list(group.values())
        try:
            with self.session.begin_nested():
                self.session.execute(
                    delete(translation_group_table).where(
                        or_(
                            translation_group_table.c.anchor_id == anchor_id,
                            translation_group_table.c.record_id.in_(members),
                        )
                    )
                )
                if group:
                    self.session.execute(
                        translation_group_table.insert(),
                        [
                            {"anchor_id": anchor_id, "locale": locale, "record_id": record_id}
                            for locale, record_id in group.items()
                        ],
                    )
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not save translation group {anchor_id}: {exc}") from exc

    def _group_anchor(self, record_id: RecordId) -> RecordId:
        stmt = select(translation_group_table.c.anchor_id).where(
            translation_group_table.c.record_id == record_id
        )
        anchor = self.session.execute(stmt).scalar_one_or_none()
        return record_id if anchor is None else anchor


if TYPE_CHECKING:
    from typing import cast

    from recordsync.domain.ports import LocaleCollaborator

    _collaborator_check: LocaleCollaborator = SqlAlchemyLocaleCollaborator(
        cast("Session", object())
    )
