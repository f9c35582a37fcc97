"""Note query engine — filtered, sorted, paginated views over a tenant's notes.

A query descriptor arrives as raw query-string pairs and is parsed once into
a ``NoteQuery``; the engine then AND-combines:

  1. the tenant scope (always, taken from the caller's auth context)
  2. ``is_archived = false`` unless archived notes are requested
  3. any-of tag membership, via the ``note_tags`` side table
  4. exact priority
  5. text search: any whitespace-separated term found in the note's
     lowercased title / content / tags / category

Results are sorted by the requested key with the id as a tiebreaker so that
page boundaries are stable, then sliced with offset/limit. The total is
counted first; a page past the end returns no rows.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

import pydantic
from pydantic import ValidationError
from sqlalchemy import case, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notes_app.core.errors import ValidationFailed
from notes_app.models.base import ApiModel, RequestModel
from notes_app.models.note import Note, NoteTag, Priority
from notes_app.models.user import User

MAX_PAGE_SIZE = 100

SortKey = Literal["createdAt", "updatedAt", "title", "priority"]

# Compared through the column so the enum type binds the stored name
_PRIORITY_RANK = case(
    (Note.priority == Priority.LOW, 0),
    (Note.priority == Priority.MEDIUM, 1),
    else_=2,
)

SORT_COLUMNS = {
    "createdAt": Note.created_at,
    "updatedAt": Note.updated_at,
    "title": Note.title,
    "priority": _PRIORITY_RANK,
}


class NoteQuery(RequestModel):
    page: int = pydantic.Field(default=1, ge=1)
    limit: int = pydantic.Field(default=10, ge=1, le=MAX_PAGE_SIZE)
    sort_by: SortKey = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"
    include_archived: bool = False
    tags: str | None = None
    priority: Priority | None = None
    search: str | None = pydantic.Field(default=None, max_length=100)

    @classmethod
    def parse(cls, params: Mapping[str, str]) -> NoteQuery:
        """Validate raw query-string pairs, raising ValidationFailed."""
        try:
            return cls.model_validate(dict(params))
        except ValidationError as exc:
            raise ValidationFailed.from_errors(exc.errors()) from exc

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return list(dict.fromkeys(t.strip() for t in self.tags.split(",") if t.strip()))

    @property
    def search_terms(self) -> list[str]:
        if not self.search:
            return []
        return list(dict.fromkeys(self.search.lower().split()))


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    pages: int


@dataclass
class NotePage:
    rows: list[tuple[Note, User | None]]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def pagination(self) -> Pagination:
        return Pagination(page=self.page, limit=self.limit, total=self.total, pages=self.pages)


def build_filters(tenant_id: str, query: NoteQuery) -> list:
    """Where-clauses for a query, always scoped to ``tenant_id``."""
    filters = [Note.tenant_id == tenant_id]

    if not query.include_archived:
        filters.append(Note.is_archived == False)  # noqa: E712

    tags = query.tag_list
    if tags:
        tagged = select(NoteTag.note_id).where(
            NoteTag.tenant_id == tenant_id,
            NoteTag.tag.in_(tags),  # type: ignore[attr-defined]
        )
        filters.append(Note.id.in_(tagged))  # type: ignore[union-attr]

    if query.priority is not None:
        filters.append(Note.priority == query.priority)

    terms = query.search_terms
    if terms:
        filters.append(or_(*(
            Note.search_text.contains(term, autoescape=True)  # type: ignore[attr-defined]
            for term in terms
        )))

    return filters


async def query_notes(session: AsyncSession, tenant_id: str, query: NoteQuery) -> NotePage:
    filters = build_filters(tenant_id, query)

    total = (await session.execute(
        select(func.count()).select_from(Note).where(*filters)
    )).scalar_one()

    # Pages past the end never reach the database; the offset may not fit a BIGINT
    offset = (query.page - 1) * query.limit
    if offset >= total:
        return NotePage(rows=[], total=total, page=query.page, limit=query.limit)

    sort_column = SORT_COLUMNS[query.sort_by]
    if query.sort_order == "asc":
        order = (sort_column.asc(), Note.id.asc())  # type: ignore[union-attr]
    else:
        order = (sort_column.desc(), Note.id.desc())  # type: ignore[union-attr]

    stmt = (
        select(Note, User)
        .join(User, Note.created_by == User.id, isouter=True)
        .where(*filters)
        .order_by(*order)
        .offset(offset)
        .limit(query.limit)
    )
    result = await session.execute(stmt)
    rows = [(note, author) for note, author in result.all()]

    return NotePage(rows=rows, total=total, page=query.page, limit=query.limit)
