"""Domain model for import reconciliation."""

from __future__ import annotations

from .enums import ErrorScope, LinkStatus, RecordStatus, SaveStatus, WarningKind
from .errors import ScopedErrors
from .exceptions import (
    LocaleConfigurationError,
    PersistenceError,
    ReconciliationError,
    SecondaryWriteError,
    StoreError,
    TermConflictError,
)
from .locale import LocaleInfo, TranslationGroup
from .record import BODY_FIELDS, Record, RecordBody, RecordId
from .results import (
    LinkResult,
    SaveFailed,
    SaveRejected,
    SaveResult,
    SaveSucceeded,
    SaveWarning,
    TermAttachResult,
)
from .taxonomy import Term, TermRef
from .unit import ImportUnit, MetaEntry

__all__ = [
    "BODY_FIELDS",
    "ErrorScope",
    "ImportUnit",
    "LinkResult",
    "LinkStatus",
    "LocaleConfigurationError",
    "LocaleInfo",
    "MetaEntry",
    "PersistenceError",
    "ReconciliationError",
    "Record",
    "RecordBody",
    "RecordId",
    "RecordStatus",
    "SaveFailed",
    "SaveRejected",
    "SaveResult",
    "SaveStatus",
    "SaveSucceeded",
    "SaveWarning",
    "ScopedErrors",
    "SecondaryWriteError",
    "StoreError",
    "Term",
    "TermAttachResult",
    "TermConflictError",
    "TermRef",
    "TranslationGroup",
    "WarningKind",
]
