"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ErrorScope(StrEnum):
    """Named buckets for validation and secondary-write diagnostics."""

    IDENTITY = "identity"
    BODY = "body"
    METADATA = "metadata"
    TAXONOMY = "taxonomy"
    LOCALE = "locale"


class RecordStatus(StrEnum):
    PUBLISH = "publish"
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"
    FUTURE = "future"
    TRASH = "trash"


class SaveStatus(StrEnum):
    """Outcome of one upsert call."""

    SAVED = "saved"
    REJECTED = "rejected"
    FAILED = "failed"


class WarningKind(StrEnum):
    SECONDARY_WRITE = "secondary_write"
    LINK = "link"


class LinkStatus(StrEnum):
    """Outcome of one locale link call."""

    LINKED = "linked"
    LOCALE_SET = "locale_set"
    SKIPPED = "skipped"
    MASTER_UNRESOLVED = "master_unresolved"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"
    CONFLICT = "conflict"
    FAILED = "failed"
