from __future__ import annotations

from datetime import timedelta

import pytest

from recordsync.config import ImporterConfig
from recordsync.domain.model import (
    ErrorScope,
    RecordBody,
    SaveFailed,
    SaveRejected,
    SaveStatus,
    SaveSucceeded,
    WarningKind,
)
from recordsync.domain.reconciliation import (
    BodyHooks,
    IdentityKeys,
    IdentityResolver,
    TaxonomyResolver,
    UpsertEngine,
    default_validator,
)
from tests.helpers.stores import FakeStores, make_stores, make_unit, term


def _engine(stores: FakeStores, hooks: BodyHooks | None = None) -> UpsertEngine:
    config = ImporterConfig()
    identity = IdentityResolver(stores.records, IdentityKeys(config.id_prefix))
    return UpsertEngine(
        records=stores.records,
        metadata=stores.metadata,
        holding=stores.holding,
        identity=identity,
        validator=default_validator(config, resolver=identity),
        taxonomy=TaxonomyResolver(stores.taxonomy),
        holding_prefix=config.holding_prefix,
        holding_ttl=timedelta(hours=1),
        hooks=hooks or BodyHooks(),
    )


@pytest.fixture
def stores() -> FakeStores:
    return make_stores()


def test_new_unit_is_created_and_tagged(stores: FakeStores) -> None:
    result = _engine(stores).save(make_unit("123", title="Hello"))

    assert isinstance(result, SaveSucceeded)
    assert result.created
    assert result.status is SaveStatus.SAVED
    assert stores.records.bodies[result.internal_id].title == "Hello"
    assert stores.metadata.get(result.internal_id, "gi_id") == "123"
    assert stores.metadata.get(result.internal_id, "gi_id_123") == "123"


def test_second_save_updates_the_same_record(stores: FakeStores) -> None:
    engine = _engine(stores)
    first = engine.save(make_unit("123", title="v1", content="kept"))
    second_unit = make_unit("123", title="v2")

    second = engine.save(second_unit)

    assert isinstance(first, SaveSucceeded)
    assert isinstance(second, SaveSucceeded)
    assert second.internal_id == first.internal_id
    assert not second.created
    assert second_unit.internal_id == first.internal_id
    stored = stores.records.bodies[first.internal_id]
    assert stored.title == "v2"
    assert stored.content == "kept"
    assert len(stores.records.bodies) == 1


def test_identity_tags_written_only_on_create(stores: FakeStores) -> None:
    engine = _engine(stores)
    engine.save(make_unit("5"))
    stores.metadata.writes.clear()

    engine.save(make_unit("5", title="again"))

    assert all(not key.startswith("gi_id") for _, key, _ in stores.metadata.writes)


def test_invalid_unit_is_rejected_and_held(stores: FakeStores) -> None:
    unit = make_unit("77", title=None)

    result = _engine(stores).save(unit)

    assert isinstance(result, SaveRejected)
    assert result.snapshot_key == "gi_invalid_record_77"
    assert result.errors.has_scope(ErrorScope.BODY)
    assert stores.records.bodies == {}
    assert stores.metadata.values == {}
    held = stores.holding.get("gi_invalid_record_77")
    assert held is not None
    assert held["external_id"] == "77"
    assert held["errors"] == {"body": {"title": "A title is required when creating a record."}}


def test_rejection_survives_holding_failure(stores: FakeStores) -> None:
    stores.holding.fail = True

    result = _engine(stores).save(make_unit("77", title=None))

    assert isinstance(result, SaveRejected)
    assert result.snapshot_key is None


def test_body_write_failure_stops_secondary_writes(stores: FakeStores) -> None:
    stores.records.fail_writes = True
    unit = make_unit("1")
    unit.add_meta("views", 1)
    unit.add_terms("tag", term("News"))

    result = _engine(stores).save(unit)

    assert isinstance(result, SaveFailed)
    assert result.status is SaveStatus.FAILED
    assert stores.metadata.writes == []
    assert stores.taxonomy.attached == set()
    assert stores.records.hooks == []


def test_metadata_written_in_input_order_last_wins(stores: FakeStores) -> None:
    unit = make_unit("1")
    unit.add_meta("color", "red")
    unit.add_meta("size", 2)
    unit.add_meta("color", "blue")

    result = _engine(stores).save(unit)

    assert isinstance(result, SaveSucceeded)
    user_writes = [(key, value) for _, key, value in stores.metadata.writes if key[:5] != "gi_id"]
    assert user_writes == [("color", "red"), ("size", 2), ("color", "blue")]
    assert stores.metadata.get(result.internal_id, "color") == "blue"


def test_metadata_failure_is_a_warning_and_others_still_written(stores: FakeStores) -> None:
    stores.metadata.fail_keys.add("bad")
    unit = make_unit("1")
    unit.add_meta("bad", 1)
    unit.add_meta("good", 2)

    result = _engine(stores).save(unit)

    assert isinstance(result, SaveSucceeded)
    assert stores.metadata.get(result.internal_id, "good") == 2
    (warning,) = result.warnings
    assert warning.kind is WarningKind.SECONDARY_WRITE
    assert warning.scope is ErrorScope.METADATA
    assert warning.key == "bad"
    assert result.warning_errors().for_scope(ErrorScope.METADATA) == {
        "bad": "The metadata value could not be written."
    }


def test_identity_tag_failure_is_a_warning(stores: FakeStores) -> None:
    stores.metadata.fail_keys.add("gi_id")

    result = _engine(stores).save(make_unit("1"))

    assert isinstance(result, SaveSucceeded)
    assert [(warning.scope, warning.key) for warning in result.warnings] == [
        (ErrorScope.IDENTITY, "gi_id")
    ]
    assert stores.metadata.get(result.internal_id, "gi_id_1") == "1"


def test_taxonomy_failures_are_keyed_by_term_name(stores: FakeStores) -> None:
    stores.taxonomy.fail_create.add("broken")
    unit = make_unit("1")
    unit.add_terms("tag", term("Broken"), term("Fine"))

    result = _engine(stores).save(unit)

    assert isinstance(result, SaveSucceeded)
    assert [outcome.succeeded for outcome in result.terms] == [False, True]
    assert result.warning_errors().for_scope(ErrorScope.TAXONOMY) == {
        "Broken": "An error occurred creating the taxonomy term."
    }


def test_field_filters_run_before_validation(stores: FakeStores) -> None:
    hooks = BodyHooks()
    hooks.add_field_filter("title", lambda value: str(value).strip().upper())
    hooks.add_field_filter("slug", lambda value: str(value).replace(" ", "-"))

    result = _engine(stores, hooks).save(make_unit("1", title="  hi ", slug="a b"))

    assert isinstance(result, SaveSucceeded)
    stored = stores.records.bodies[result.internal_id]
    assert stored.title == "HI"
    assert stored.slug == "a-b"


def test_write_hooks_are_scoped_to_the_importer_write(stores: FakeStores) -> None:
    hooks = BodyHooks()
    hooks.add_write_hook(lambda row: {**row, "excerpt": "stamped"})

    result = _engine(stores, hooks).save(make_unit("1"))

    assert isinstance(result, SaveSucceeded)
    assert stores.records.bodies[result.internal_id].excerpt == "stamped"
    assert stores.records.hook_history == [1]
    assert stores.records.hooks == []


def test_vanished_record_is_recreated(stores: FakeStores) -> None:
    engine = _engine(stores)
    first = engine.save(make_unit("9"))
    assert isinstance(first, SaveSucceeded)
    del stores.records.bodies[first.internal_id]

    second = engine.save(make_unit("9"))

    assert isinstance(second, SaveSucceeded)
    assert second.created
    assert second.internal_id != first.internal_id


def test_update_overlays_only_provided_fields(stores: FakeStores) -> None:
    engine = _engine(stores)
    first = engine.save(make_unit("3", status="publish", excerpt="short"))
    unit = make_unit("3", title=None)
    unit.body = RecordBody(content="new content")

    second = engine.save(unit)

    assert isinstance(first, SaveSucceeded)
    assert isinstance(second, SaveSucceeded)
    stored = stores.records.bodies[first.internal_id]
    assert stored.title == "Imported title"
    assert stored.status == "publish"
    assert stored.excerpt == "short"
    assert stored.content == "new content"


def test_vanished_record_needs_a_title_again(stores: FakeStores) -> None:
    engine = _engine(stores)
    first = engine.save(make_unit("9"))
    assert isinstance(first, SaveSucceeded)
    del stores.records.bodies[first.internal_id]
    unit = make_unit("9", title=None)
    unit.body = RecordBody(content="only content")

    result = engine.save(unit)

    assert isinstance(result, SaveRejected)
    assert "title" in result.errors.for_scope(ErrorScope.BODY)
    assert unit.internal_id is None
    assert list(stores.records.bodies) == []


def test_identity_lookup_failure_is_a_failed_save(stores: FakeStores) -> None:
    engine = _engine(stores)
    stores.records.fail_lookups = True

    result = engine.save(make_unit("12"))

    assert isinstance(result, SaveFailed)
    assert "index lookup" in str(result.error)
    assert stores.records.bodies == {}
    assert stores.metadata.writes == []
