"""Initial content store schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from recordsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "record",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("record_type", sa.String(length=20), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("extra", sa.JSON(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_record"),
    )
    op.create_table(
        "term",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("taxonomy", sa.String(length=32), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["parent_id"], ["term.id"], name="fk_term_parent_id_term", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_term"),
        sa.UniqueConstraint("taxonomy", "slug", name="uq_term_taxonomy_slug"),
    )
    op.create_table(
        "record_meta",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("value", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(
            ["record_id"],
            ["record.id"],
            name="fk_record_meta_record_id_record",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_record_meta"),
        sa.UniqueConstraint("record_id", "key", name="uq_record_meta_record_key"),
    )
    op.create_index("ix_record_meta_key", "record_meta", ["key"], unique=False)
    op.create_table(
        "record_term",
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column("term_id", sa.Integer(), nullable=False),
        sa.Column("taxonomy", sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(
            ["record_id"],
            ["record.id"],
            name="fk_record_term_record_id_record",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["term_id"], ["term.id"], name="fk_record_term_term_id_term", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("record_id", "term_id", name="pk_record_term"),
    )
    op.create_table(
        "record_locale",
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.Column("locale", sa.String(length=16), nullable=False),
        sa.ForeignKeyConstraint(
            ["record_id"],
            ["record.id"],
            name="fk_record_locale_record_id_record",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("record_id", name="pk_record_locale"),
    )
    op.create_table(
        "translation_group",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("anchor_id", sa.Integer(), nullable=False),
        sa.Column("locale", sa.String(length=16), nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["record_id"],
            ["record.id"],
            name="fk_translation_group_record_id_record",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_translation_group"),
        sa.UniqueConstraint("anchor_id", "locale", name="uq_translation_group_anchor_locale"),
        sa.UniqueConstraint("record_id", name="uq_translation_group_record"),
    )
    op.create_table(
        "held_snapshot",
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("expires_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("key", name="pk_held_snapshot"),
    )
    op.create_index(
        "ix_held_snapshot_expires_at", "held_snapshot", ["expires_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_held_snapshot_expires_at", table_name="held_snapshot")
    op.drop_table("held_snapshot")
    op.drop_table("translation_group")
    op.drop_table("record_locale")
    op.drop_table("record_term")
    op.drop_index("ix_record_meta_key", table_name="record_meta")
    op.drop_table("record_meta")
    op.drop_table("term")
    op.drop_table("record")
