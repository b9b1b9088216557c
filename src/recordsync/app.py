"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from recordsync.adapters.payload import PayloadError, read_json_lines
from recordsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from recordsync.config import get_importer_config
from recordsync.domain.model import SaveFailed, SaveRejected, SaveSucceeded
from recordsync.domain.ports import ImportUnitOfWork
from recordsync.domain.reconciliation import build_reconciler

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from pathlib import Path

    from recordsync.config import ImporterConfig
    from recordsync.domain.model import ImportUnit, SaveResult
    from recordsync.domain.reconciliation import BodyHooks

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class ImportSummary:
    created: int = 0
    updated: int = 0
    rejected: int = 0
    failed: int = 0
    malformed: int = 0
    warnings: int = 0
    results: list[tuple[str, SaveResult]] = field(default_factory=list["tuple[str, SaveResult]"])

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.rejected + self.failed

    @property
    def ok(self) -> bool:
        return not (self.rejected or self.failed or self.malformed)

    def record(self, external_id: str, result: SaveResult) -> None:
        self.results.append((external_id, result))
        match result:
            case SaveSucceeded(created=True):
                self.created += 1
                self.warnings += len(result.warnings)
            case SaveSucceeded():
                self.updated += 1
                self.warnings += len(result.warnings)
            case SaveRejected():
                self.rejected += 1
            case SaveFailed():
                self.failed += 1


def _default_unit_of_work_factory(config: ImporterConfig) -> UnitOfWorkFactory:
    if not is_started():
        startup()

    def factory() -> ImportUnitOfWork:
        return SqlAlchemyImportUnitOfWork(config)

    return factory


def import_units(
    units: Iterable[ImportUnit | PayloadError],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ImporterConfig | None = None,
    hooks: BodyHooks | None = None,
) -> ImportSummary:
    """Reconcile a batch of staged units, committing after each one.

    A failed body write rolls back only that unit; rejected units are committed
    so their held snapshot survives.
    """

    effective_config = config or get_importer_config()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory(effective_config)
    summary = ImportSummary()

    with effective_uow() as uow:
        reconciler = build_reconciler(uow.repositories, effective_config, hooks=hooks)
        for unit in units:
            if isinstance(unit, PayloadError):
                summary.malformed += 1
                continue
            result = reconciler.reconcile(unit)
            if isinstance(result, SaveFailed):
                uow.rollback()
            else:
                uow.commit()
            summary.record(unit.external_id, result)

    log.info(
        "Finished import: created=%s, updated=%s, rejected=%s, failed=%s, malformed=%s, "
        "warnings=%s",
        summary.created,
        summary.updated,
        summary.rejected,
        summary.failed,
        summary.malformed,
        summary.warnings,
    )
    return summary


def import_file(
    path: Path,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ImporterConfig | None = None,
    hooks: BodyHooks | None = None,
) -> ImportSummary:
    """Import a JSON-lines file with one payload per line."""

    log.info("Starting import from %s", path)
    with path.open(encoding="utf-8") as handle:
        return import_units(
            read_json_lines(handle),
            unit_of_work_factory=unit_of_work_factory,
            config=config,
            hooks=hooks,
        )


def show_held(
    key: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    now: datetime | None = None,
) -> dict[str, object] | None:
    """Return a held snapshot by key, or ``None`` when missing or expired."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory(get_importer_config())
    with effective_uow() as uow:
        return uow.repositories.holding.get(key, now=now)


def purge_held(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    now: datetime | None = None,
) -> int:
    """Delete expired held snapshots and return how many were removed."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory(get_importer_config())
    with effective_uow() as uow:
        removed = uow.repositories.holding.purge_expired(now=now)
        uow.commit()
    log.info("Purged %s expired held snapshots", removed)
    return removed
