from __future__ import annotations

import json

import pytest

from recordsync.domain.model import (
    ErrorScope,
    ImportUnit,
    LocaleInfo,
    MetaEntry,
    Record,
    RecordBody,
    ScopedErrors,
    TermRef,
)


def test_external_id_cannot_be_reassigned() -> None:
    unit = ImportUnit(external_id="42")

    with pytest.raises(AttributeError):
        unit.external_id = "43"

    assert unit.external_id == "42"


def test_internal_id_is_mutable_and_drives_is_new() -> None:
    unit = ImportUnit(external_id="42")
    assert unit.is_new

    unit.internal_id = 7

    assert not unit.is_new


def test_add_meta_keeps_insertion_order() -> None:
    unit = ImportUnit(external_id="1")
    unit.add_meta("b", 1)
    unit.add_meta("a", 2)
    unit.add_meta("b", 3)

    assert unit.metadata == [MetaEntry("b", 1), MetaEntry("a", 2), MetaEntry("b", 3)]


def test_snapshot_is_json_serialisable_and_complete() -> None:
    unit = ImportUnit(
        external_id="9",
        body=RecordBody(title="Hello", extra={"color": "red"}),
        locale=LocaleInfo(locale="fi", master_external_id="gi_id_1"),
    )
    unit.add_meta("views", 10)
    unit.add_terms("category", TermRef(name="News", slug="news"))
    unit.add_error(ErrorScope.BODY, "slug", "bad slug")

    snapshot = unit.snapshot()

    assert json.loads(json.dumps(snapshot)) == snapshot
    assert snapshot["external_id"] == "9"
    assert snapshot["body"] == {"title": "Hello", "color": "red"}
    assert snapshot["metadata"] == [{"key": "views", "value": 10}]
    assert snapshot["taxonomies"] == {
        "category": [{"name": "News", "slug": "news", "parent_slug": None, "description": None}]
    }
    assert snapshot["locale"] == {"locale": "fi", "master_external_id": "gi_id_1"}
    assert snapshot["errors"] == {"body": {"slug": "bad slug"}}


def test_body_overlay_keeps_fields_not_provided() -> None:
    stored = RecordBody(title="Old", content="Body", status="publish", extra={"a": 1})
    staged = RecordBody(title="New", extra={"b": 2})

    merged = stored.overlay(staged)

    assert merged.title == "New"
    assert merged.content == "Body"
    assert merged.status == "publish"
    assert merged.extra == {"a": 1, "b": 2}
    assert stored.title == "Old"


def test_body_from_fields_routes_unknown_keys_to_extra() -> None:
    body = RecordBody.from_fields({"title": 5, "slug": "five", "custom": [1, 2], "status": None})

    assert body.title == "5"
    assert body.slug == "five"
    assert body.status is None
    assert body.extra == {"custom": [1, 2]}


def test_record_apply_and_to_body() -> None:
    record = Record(title="Existing", status="publish")

    record.apply(RecordBody(content="Updated", extra={"k": "v"}))
    body = record.to_body()

    assert body.title == "Existing"
    assert body.content == "Updated"
    assert body.status == "publish"
    assert body.extra == {"k": "v"}


def test_locale_info_master_presence() -> None:
    assert not LocaleInfo(locale="en").has_master
    assert not LocaleInfo(locale="en", master_external_id="  ").has_master
    assert LocaleInfo(locale="en", master_external_id="5").has_master


class TestScopedErrors:
    def test_errors_accumulate_per_scope(self) -> None:
        errors = ScopedErrors()
        errors.add(ErrorScope.BODY, "title", "missing")
        errors.add(ErrorScope.TAXONOMY, "News", "failed")
        errors.add(ErrorScope.BODY, "slug", "bad")

        assert errors.scopes == (ErrorScope.BODY, ErrorScope.TAXONOMY)
        assert errors.for_scope(ErrorScope.BODY) == {"title": "missing", "slug": "bad"}
        assert len(errors) == 3
        assert bool(errors)

    def test_later_message_replaces_same_key(self) -> None:
        errors = ScopedErrors()
        errors.add(ErrorScope.BODY, "title", "first")
        errors.add(ErrorScope.BODY, "title", "second")

        assert errors.for_scope(ErrorScope.BODY) == {"title": "second"}

    def test_empty_collection_is_falsy(self) -> None:
        errors = ScopedErrors()
        errors.extend(ErrorScope.METADATA, {})

        assert not errors
        assert errors.as_dict() == {}
        assert not errors.has_scope(ErrorScope.METADATA)

    def test_iteration_keeps_scope_order(self) -> None:
        first = ScopedErrors()
        first.add(ErrorScope.BODY, "title", "missing")
        first.extend(ErrorScope.LOCALE, {"locale": "bad"})

        assert list(first) == [
            (ErrorScope.BODY, "title", "missing"),
            (ErrorScope.LOCALE, "locale", "bad"),
        ]
        assert first.as_dict() == {"body": {"title": "missing"}, "locale": {"locale": "bad"}}
