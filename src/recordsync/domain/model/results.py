"""Result contracts returned by the upsert engine, taxonomy resolver and link manager.

Every outcome is an explicit object: callers never have to interpret a falsy
return or an error array.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from .enums import ErrorScope, LinkStatus, SaveStatus, WarningKind
from .errors import ScopedErrors

if TYPE_CHECKING:
    from .exceptions import PersistenceError
    from .locale import TranslationGroup
    from .record import RecordId
    from .taxonomy import TermRef


@dataclass(frozen=True, slots=True, kw_only=True)
class SaveWarning:
    """A non-fatal problem recorded next to a successful save."""

    kind: WarningKind
    scope: ErrorScope
    key: str
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class TermAttachResult:
    taxonomy: str
    term: TermRef
    term_id: int | None = None
    created: bool = False
    attached: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.attached and self.error is None


@dataclass(slots=True, kw_only=True)
class SaveSucceeded:
    """The record body is committed; secondary problems are listed as warnings."""

    internal_id: RecordId
    created: bool
    warnings: list[SaveWarning] = field(default_factory=list["SaveWarning"])
    terms: list[TermAttachResult] = field(default_factory=list["TermAttachResult"])
    status: Literal[SaveStatus.SAVED] = SaveStatus.SAVED

    def warning_errors(self) -> ScopedErrors:
        errors = ScopedErrors()
        for warning in self.warnings:
            errors.add(warning.scope, warning.key, warning.message)
        return errors


@dataclass(slots=True, kw_only=True)
class SaveRejected:
    """Validation failed; nothing was written except the held snapshot."""

    errors: ScopedErrors
    snapshot_key: str | None = None
    status: Literal[SaveStatus.REJECTED] = SaveStatus.REJECTED


@dataclass(slots=True, kw_only=True)
class SaveFailed:
    """The body write failed; no metadata or taxonomy write was attempted."""

    error: PersistenceError
    status: Literal[SaveStatus.FAILED] = SaveStatus.FAILED


type SaveResult = SaveSucceeded | SaveRejected | SaveFailed


@dataclass(slots=True, kw_only=True)
class LinkResult:
    status: LinkStatus
    message: str | None = None
    group: TranslationGroup | None = None

    @property
    def is_warning(self) -> bool:
        return self.status in {
            LinkStatus.MASTER_UNRESOLVED,
            LinkStatus.INVALID,
            LinkStatus.UNAVAILABLE,
            LinkStatus.CONFLICT,
            LinkStatus.FAILED,
        }
