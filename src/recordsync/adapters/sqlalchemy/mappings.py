"""SQLAlchemy mapping metadata for the content store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from recordsync.domain.model import Record, Term

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

record_table = Table(
    "record",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String, nullable=False, default=""),
    Column("content", Text, nullable=False, default=""),
    Column("excerpt", Text, nullable=False, default=""),
    Column("status", String(20), nullable=False, default="draft"),
    Column("record_type", String(20), nullable=False, default="post"),
    Column("slug", String, nullable=True),
    Column("extra", JSON, nullable=False, default=dict),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

record_meta_table = Table(
    "record_meta",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "record_id", Integer, ForeignKey("record.id", ondelete="CASCADE"), nullable=False
    ),
    Column("key", String, nullable=False),
    Column("value", JSON, nullable=True),
    UniqueConstraint("record_id", "key", name="uq_record_meta_record_key"),
    Index("ix_record_meta_key", "key"),
)

term_table = Table(
    "term",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("taxonomy", String(32), nullable=False),
    Column("slug", String, nullable=False),
    Column("name", String, nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("parent_id", Integer, ForeignKey("term.id", ondelete="SET NULL"), nullable=True),
    UniqueConstraint("taxonomy", "slug", name="uq_term_taxonomy_slug"),
)

record_term_table = Table(
    "record_term",
    mapper_registry.metadata,
    Column(
        "record_id", Integer, ForeignKey("record.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("term_id", Integer, ForeignKey("term.id", ondelete="CASCADE"), primary_key=True),
    Column("taxonomy", String(32), nullable=False),
)

record_locale_table = Table(
    "record_locale",
    mapper_registry.metadata,
    Column(
        "record_id", Integer, ForeignKey("record.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("locale", String(16), nullable=False),
)

translation_group_table = Table(
    "translation_group",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("anchor_id", Integer, nullable=False),
    Column("locale", String(16), nullable=False),
    Column(
        "record_id", Integer, ForeignKey("record.id", ondelete="CASCADE"), nullable=False
    ),
    UniqueConstraint("anchor_id", "locale", name="uq_translation_group_anchor_locale"),
    UniqueConstraint("record_id", name="uq_translation_group_record"),
)

held_snapshot_table = Table(
    "held_snapshot",
    mapper_registry.metadata,
    Column("key", String, primary_key=True),
    Column("payload", JSON, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("expires_at", UTCDateTime(), nullable=False),
    Index("ix_held_snapshot_expires_at", "expires_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Record, record_table)
    mapper_registry.map_imperatively(Term, term_table)

    configure_mappers()
    return mapper_registry
