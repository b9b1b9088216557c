"""Domain port definitions for adapters."""

from __future__ import annotations

from .localization import LocaleCollaborator
from .persistence import HoldingArea, MetadataStore, RecordStore, TaxonomyStore, WriteHook
from .unit_of_work import ImportRepositories, ImportUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "HoldingArea",
    "ImportRepositories",
    "ImportUnitOfWork",
    "LocaleCollaborator",
    "MetadataStore",
    "RecordStore",
    "RepositoryCollection",
    "TaxonomyStore",
    "UnitOfWork",
    "WriteHook",
]
