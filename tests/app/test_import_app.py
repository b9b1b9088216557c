from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from recordsync.adapters.payload import PayloadError
from recordsync.app import import_file, import_units, purge_held, show_held
from recordsync.config import ImporterConfig
from recordsync.domain.model import SaveFailed, SaveRejected, SaveSucceeded, StoreError
from recordsync.domain.reconciliation import BodyHooks
from tests.helpers.stores import (
    FakeImportUnitOfWork,
    FakeLocaleCollaborator,
    make_stores,
    make_unit,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_import_units_commits_each_saved_or_rejected_unit() -> None:
    stores = make_stores(FakeLocaleCollaborator())
    uow = FakeImportUnitOfWork(stores)

    summary = import_units(
        [make_unit("1"), make_unit("2", title=None), make_unit("1", title="again")],
        unit_of_work_factory=lambda: uow,
        config=ImporterConfig(),
    )

    assert summary.created == 1
    assert summary.updated == 1
    assert summary.rejected == 1
    assert summary.processed == 3
    assert not summary.ok
    assert uow.commits == 3
    assert uow.rollbacks == 0
    assert [type(result) for _, result in summary.results] == [
        SaveSucceeded,
        SaveRejected,
        SaveSucceeded,
    ]


def test_failed_unit_is_rolled_back_and_batch_continues() -> None:
    stores = make_stores()
    uow = FakeImportUnitOfWork(stores)
    hooks = BodyHooks()

    def refuse_boom(row: dict[str, object]) -> dict[str, object]:
        if row.get("title") == "boom":
            raise StoreError("write refused")
        return row

    hooks.add_write_hook(refuse_boom)

    summary = import_units(
        [make_unit("1", title="boom"), make_unit("2", title="fine")],
        unit_of_work_factory=lambda: uow,
        config=ImporterConfig(),
        hooks=hooks,
    )

    assert summary.failed == 1
    assert summary.created == 1
    assert isinstance(summary.results[0][1], SaveFailed)
    assert uow.rollbacks == 1
    assert uow.commits == 1


def test_malformed_payloads_are_counted() -> None:
    uow = FakeImportUnitOfWork(make_stores())

    summary = import_units(
        [PayloadError("broken", line=1), make_unit("1")],
        unit_of_work_factory=lambda: uow,
        config=ImporterConfig(),
    )

    assert summary.malformed == 1
    assert summary.created == 1
    assert not summary.ok


def test_import_file_reads_json_lines(tmp_path: Path) -> None:
    path = tmp_path / "units.jsonl"
    path.write_text(
        "\n".join(
            json.dumps(payload)
            for payload in (
                {"id": "1", "post": {"title": "One"}, "meta": {"views": 1}},
                {"id": "2", "post": {"title": "Two"}},
            )
        ),
        encoding="utf-8",
    )
    stores = make_stores()
    uow = FakeImportUnitOfWork(stores)

    summary = import_file(path, unit_of_work_factory=lambda: uow, config=ImporterConfig())

    assert summary.ok
    assert summary.created == 2
    assert len(stores.records.bodies) == 2


def test_show_and_purge_held_snapshots() -> None:
    stores = make_stores()
    uow = FakeImportUnitOfWork(stores)
    import_units(
        [make_unit("9", title=None)],
        unit_of_work_factory=lambda: uow,
        config=ImporterConfig(),
    )

    held = show_held("gi_invalid_record_9", unit_of_work_factory=lambda: uow)
    removed = purge_held(
        unit_of_work_factory=lambda: uow,
        now=datetime.now(tz=UTC) + timedelta(hours=2),
    )

    assert held is not None
    assert held["external_id"] == "9"
    assert removed == 1
    assert show_held("gi_invalid_record_9", unit_of_work_factory=lambda: uow) is None
