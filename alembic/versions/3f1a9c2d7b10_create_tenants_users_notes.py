"""create tenants, users, notes and note_tags

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 09:12:44.201735

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7b10'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

subscription = sa.Enum("FREE", "PRO", name="subscription")
userrole = sa.Enum("ADMIN", "MEMBER", name="userrole")
priority = sa.Enum("LOW", "MEDIUM", "HIGH", name="priority")


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(24), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(50), nullable=False),
        sa.Column("subscription", subscription, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)
    op.create_index("ix_tenants_is_active", "tenants", ["is_active"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(24), primary_key=True),
        sa.Column("tenant_id", sa.String(24), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", userrole, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "notes",
        sa.Column("id", sa.String(24), primary_key=True),
        sa.Column("tenant_id", sa.String(24), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("created_by", sa.String(24), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("priority", priority, nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("search_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notes_tenant_id", "notes", ["tenant_id"])
    op.create_index("ix_notes_created_by", "notes", ["created_by"])
    op.create_index("ix_notes_priority", "notes", ["priority"])
    op.create_index("ix_notes_is_archived", "notes", ["is_archived"])
    op.create_index("ix_notes_tenant_created", "notes", ["tenant_id", "created_at"])

    op.create_table(
        "note_tags",
        sa.Column("note_id", sa.String(24), sa.ForeignKey("notes.id"), primary_key=True),
        sa.Column("tag", sa.String(50), primary_key=True),
        sa.Column("tenant_id", sa.String(24), sa.ForeignKey("tenants.id"), nullable=False),
    )
    op.create_index("ix_note_tags_tag", "note_tags", ["tag"])
    op.create_index("ix_note_tags_tenant_id", "note_tags", ["tenant_id"])


def downgrade() -> None:
    op.drop_table("note_tags")
    op.drop_table("notes")
    op.drop_table("users")
    op.drop_table("tenants")
    priority.drop(op.get_bind(), checkfirst=True)
    userrole.drop(op.get_bind(), checkfirst=True)
    subscription.drop(op.get_bind(), checkfirst=True)
