"""Record bodies and the persisted record entity."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

type RecordId = int

BODY_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "content",
    "excerpt",
    "status",
    "record_type",
    "slug",
)


@dataclass(slots=True, kw_only=True)
class RecordBody:
    """Flat record fields as staged by the caller.

    ``None`` means "not provided": on update the stored value is kept.
    ``extra`` carries any further flat field the source system sends.
    """

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    status: str | None = None
    record_type: str | None = None
    slug: str | None = None
    extra: dict[str, object] = field(default_factory=dict["str", "object"])

    def provided(self) -> dict[str, object]:
        """Return the provided flat fields, ``extra`` included."""

        values: dict[str, object] = {
            name: getattr(self, name) for name in BODY_FIELDS if getattr(self, name) is not None
        }
        values.update(self.extra)
        return values

    def overlay(self, other: RecordBody) -> RecordBody:
        """Return a copy with every field provided by ``other`` applied on top."""

        changes: dict[str, object] = {
            name: getattr(other, name) for name in BODY_FIELDS if getattr(other, name) is not None
        }
        merged_extra = {**self.extra, **other.extra}
        return replace(self, **changes, extra=merged_extra)

    @classmethod
    def from_fields(cls, values: Mapping[str, object]) -> RecordBody:
        """Build a body from a flat mapping, routing unknown keys to ``extra``."""

        body = cls(extra={key: value for key, value in values.items() if key not in BODY_FIELDS})
        for name in BODY_FIELDS:
            value = values.get(name)
            if value is not None:
                setattr(body, name, str(value))
        return body


@dataclass(eq=False, kw_only=True)
class Record:
    """A record as owned by the content store."""

    id: RecordId | None = None
    title: str = ""
    content: str = ""
    excerpt: str = ""
    status: str = "draft"
    record_type: str = "post"
    slug: str | None = None
    extra: dict[str, object] = field(default_factory=dict["str", "object"])
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def apply(self, body: RecordBody) -> None:
        for name in BODY_FIELDS:
            value = getattr(body, name)
            if value is not None:
                setattr(self, name, value)
        if body.extra:
            self.extra = {**self.extra, **body.extra}
        self.updated_at = datetime.now(tz=UTC)

    def to_body(self) -> RecordBody:
        return RecordBody(
            title=self.title,
            content=self.content,
            excerpt=self.excerpt,
            status=self.status,
            record_type=self.record_type,
            slug=self.slug,
            extra=dict(self.extra),
        )

