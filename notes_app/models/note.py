"""Note model — short text notes scoped to a tenant and an author."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated

import pydantic
from pydantic import AfterValidator, StringConstraints, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import JSON, Index, Text
from sqlmodel import Column, Field, SQLModel

from notes_app.models.base import ApiModel, RequestModel, TimestampMixin, new_object_id
from notes_app.models.user import AuthorRead, User

MAX_TAGS = 10


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Note(TimestampMixin, SQLModel, table=True):
    __tablename__ = "notes"
    __table_args__ = (Index("ix_notes_tenant_created", "tenant_id", "created_at"),)

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    tenant_id: str = Field(foreign_key="tenants.id", nullable=False, index=True, max_length=24)
    # Weak reference: notes outlive their author
    created_by: str = Field(foreign_key="users.id", nullable=False, index=True, max_length=24)

    title: str = Field(max_length=200, nullable=False)
    content: str = Field(sa_column=Column(Text, nullable=False))
    # Ordered tag list for display; NoteTag mirrors it for filtering
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    priority: Priority = Field(default=Priority.MEDIUM, index=True)
    category: str = Field(default="", max_length=100)
    is_archived: bool = Field(default=False, index=True)

    # Lowercased title + content + tags + category for text search
    search_text: str = Field(
        default="", sa_column=Column(Text, nullable=False, server_default=""),
    )

    def refresh_search_text(self) -> None:
        parts = [self.title, self.content, *self.tags, self.category]
        self.search_text = "\n".join(p for p in parts if p).lower()


class NoteTag(SQLModel, table=True):
    """One row per (note, tag); backs the any-of tag filter."""

    __tablename__ = "note_tags"

    note_id: str = Field(foreign_key="notes.id", primary_key=True, max_length=24)
    tag: str = Field(primary_key=True, max_length=50, index=True)
    tenant_id: str = Field(foreign_key="tenants.id", nullable=False, index=True, max_length=24)


# ── Pydantic schemas ─────────────────────────────────────────

def _dedupe_tags(tags: list[str]) -> list[str]:
    """Drop blank tags and repeats, keeping first-seen order."""
    return list(dict.fromkeys(tag for tag in tags if tag))


Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Content = Annotated[str, StringConstraints(min_length=1, max_length=10000)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]
TagList = Annotated[list[Tag], pydantic.Field(max_length=MAX_TAGS), AfterValidator(_dedupe_tags)]
Category = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class NoteCreate(RequestModel):
    title: Title
    content: Content
    tags: TagList = pydantic.Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    category: Category = ""


class NoteUpdate(RequestModel):
    """Partial update; at least one field, never the tenant or author."""
    title: Title | None = None
    content: Content | None = None
    tags: TagList | None = None
    priority: Priority | None = None
    category: Category | None = None
    is_archived: bool | None = None

    @model_validator(mode="after")
    def _require_values(self) -> "NoteUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


class NoteRead(ApiModel):
    id: str
    title: str
    content: str
    tags: list[str]
    priority: Priority
    category: str
    is_archived: bool
    tenant_id: str
    created_by: AuthorRead | None
    created_at: datetime
    updated_at: datetime


def note_to_read(note: Note, author: User | None) -> NoteRead:
    return NoteRead(
        id=note.id,
        title=note.title,
        content=note.content,
        tags=list(note.tags or []),
        priority=note.priority,
        category=note.category,
        is_archived=note.is_archived,
        tenant_id=note.tenant_id,
        created_by=AuthorRead(
            id=author.id,
            email=author.email,
            first_name=author.first_name,
            last_name=author.last_name,
        ) if author is not None else None,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )
