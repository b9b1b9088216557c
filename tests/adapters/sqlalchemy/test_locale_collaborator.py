from __future__ import annotations

from sqlalchemy.orm import Session  # noqa: TC002

from recordsync.adapters.sqlalchemy import SqlAlchemyLocaleCollaborator, SqlAlchemyRecordStore
from recordsync.domain.model import RecordBody
from recordsync.domain.ports import LocaleCollaborator


def _records(session: Session, count: int) -> list[int]:
    store = SqlAlchemyRecordStore(session)
    return [store.create(RecordBody(title=f"r{index}")) for index in range(count)]


def test_collaborator_satisfies_port(sqlite_session: Session) -> None:
    collaborator = SqlAlchemyLocaleCollaborator(sqlite_session, languages=("en", "fi"))

    assert isinstance(collaborator, LocaleCollaborator)
    assert collaborator.is_active()
    assert collaborator.languages() == ("en", "fi")
    assert not SqlAlchemyLocaleCollaborator(sqlite_session, active=False).is_active()


def test_record_locale_is_replaced(sqlite_session: Session) -> None:
    (record_id,) = _records(sqlite_session, 1)
    collaborator = SqlAlchemyLocaleCollaborator(sqlite_session)

    collaborator.set_record_locale(record_id, "en")
    collaborator.set_record_locale(record_id, "fi")

    assert collaborator.get_record_locale(record_id) == "fi"
    assert collaborator.get_record_locale(record_id + 100) is None


def test_group_saved_and_read_from_any_member(sqlite_session: Session) -> None:
    master, finnish, swedish = _records(sqlite_session, 3)
    collaborator = SqlAlchemyLocaleCollaborator(sqlite_session)

    collaborator.save_translation_group(master, {"en": master, "fi": finnish})
    collaborator.save_translation_group(master, {"en": master, "fi": finnish, "sv": swedish})

    expected = {"en": master, "fi": finnish, "sv": swedish}
    assert collaborator.get_translation_group(master) == expected
    assert collaborator.get_translation_group(swedish) == expected


def test_member_moves_out_of_previous_group(sqlite_session: Session) -> None:
    first_master, second_master, translation = _records(sqlite_session, 3)
    collaborator = SqlAlchemyLocaleCollaborator(sqlite_session)

    collaborator.save_translation_group(first_master, {"en": first_master, "fi": translation})
    collaborator.save_translation_group(second_master, {"en": second_master, "fi": translation})

    assert collaborator.get_translation_group(second_master) == {
        "en": second_master,
        "fi": translation,
    }
    assert collaborator.get_translation_group(first_master) == {"en": first_master}


def test_unknown_record_has_empty_group(sqlite_session: Session) -> None:
    collaborator = SqlAlchemyLocaleCollaborator(sqlite_session)

    assert collaborator.get_translation_group(12345) == {}
