"""SQLAlchemy adapter package for recordsync."""

from __future__ import annotations

from .localization import SqlAlchemyLocaleCollaborator
from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyHoldingArea,
    SqlAlchemyMetadataStore,
    SqlAlchemyRecordStore,
    SqlAlchemyTaxonomyStore,
)
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    create_store_engine,
    enable_sqlite_savepoints,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyHoldingArea",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyLocaleCollaborator",
    "SqlAlchemyMetadataStore",
    "SqlAlchemyRecordStore",
    "SqlAlchemyTaxonomyStore",
    "StartupError",
    "create_store_engine",
    "enable_sqlite_savepoints",
    "mapper_registry",
    "start_mappers",
    "shutdown",
    "startup",
]
