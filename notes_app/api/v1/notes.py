"""Note CRUD — every query is scoped to the caller's tenant."""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notes_app.api.deps import MemberAuth, NotesQuery, Session
from notes_app.core.errors import NotFound
from notes_app.models.base import (
    OBJECT_ID_PATTERN,
    ApiModel,
    DataResponse,
    MessageDataResponse,
    MessageResponse,
    utcnow,
)
from notes_app.models.note import Note, NoteCreate, NoteRead, NoteTag, NoteUpdate, note_to_read
from notes_app.models.user import User
from notes_app.services.note_query import Pagination, query_notes
from notes_app.services.subscription import ensure_can_create_note

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])

NoteId = Annotated[str, Path(pattern=OBJECT_ID_PATTERN, description="24 hex characters")]


# ── Schemas ──────────────────────────────────────────────────

class NoteData(ApiModel):
    note: NoteRead


class NoteListData(ApiModel):
    notes: list[NoteRead]
    pagination: Pagination


# ── Routes ───────────────────────────────────────────────────

@router.post(
    "",
    response_model=MessageDataResponse[NoteData],
    status_code=status.HTTP_201_CREATED,
)
async def create_note(
    body: NoteCreate,
    auth: MemberAuth,
    session: Session,
) -> MessageDataResponse[NoteData]:
    await ensure_can_create_note(session, auth.tenant)

    note = Note(
        tenant_id=auth.tenant_id,
        created_by=auth.user_id,
        title=body.title,
        content=body.content,
        tags=body.tags,
        priority=body.priority,
        category=body.category,
    )
    note.refresh_search_text()
    session.add(note)
    await session.flush()  # populate note.id for the tag rows
    await _replace_tags(note, session)
    await session.commit()
    await session.refresh(note)

    return MessageDataResponse[NoteData](
        message="Note created successfully",
        data=NoteData(note=note_to_read(note, auth.user)),
    )


@router.get("", response_model=DataResponse[NoteListData])
async def list_notes(
    query: NotesQuery,
    auth: MemberAuth,
    session: Session,
) -> DataResponse[NoteListData]:
    page = await query_notes(session, auth.tenant_id, query)
    return DataResponse[NoteListData](data=NoteListData(
        notes=[note_to_read(note, author) for note, author in page.rows],
        pagination=page.pagination(),
    ))


@router.get("/{note_id}", response_model=DataResponse[NoteData])
async def get_note(
    note_id: NoteId,
    auth: MemberAuth,
    session: Session,
) -> DataResponse[NoteData]:
    note = await _get_or_404(note_id, auth.tenant_id, session)
    return DataResponse[NoteData](data=NoteData(note=await _to_read(note, session)))


@router.put("/{note_id}", response_model=MessageDataResponse[NoteData])
async def update_note(
    note_id: NoteId,
    body: NoteUpdate,
    auth: MemberAuth,
    session: Session,
) -> MessageDataResponse[NoteData]:
    note = await _get_or_404(note_id, auth.tenant_id, session)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(note, field, value)

    note.refresh_search_text()
    if "tags" in update_data:
        await _replace_tags(note, session)

    note.updated_at = utcnow()
    session.add(note)
    await session.commit()
    await session.refresh(note)

    return MessageDataResponse[NoteData](
        message="Note updated successfully",
        data=NoteData(note=await _to_read(note, session)),
    )


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: NoteId,
    auth: MemberAuth,
    session: Session,
) -> MessageResponse:
    note = await _get_or_404(note_id, auth.tenant_id, session)
    await session.execute(delete(NoteTag).where(NoteTag.note_id == note.id))
    await session.delete(note)
    await session.commit()
    return MessageResponse(message="Note deleted successfully")


@router.patch("/{note_id}/archive", response_model=MessageDataResponse[NoteData])
async def toggle_archive(
    note_id: NoteId,
    auth: MemberAuth,
    session: Session,
) -> MessageDataResponse[NoteData]:
    note = await _get_or_404(note_id, auth.tenant_id, session)
    note.is_archived = not note.is_archived
    note.updated_at = utcnow()
    session.add(note)
    await session.commit()
    await session.refresh(note)

    state = "archived" if note.is_archived else "unarchived"
    return MessageDataResponse[NoteData](
        message=f"Note {state} successfully",
        data=NoteData(note=await _to_read(note, session)),
    )


# ── Internal helpers ─────────────────────────────────────────

async def _get_or_404(note_id: str, tenant_id: str, session: AsyncSession) -> Note:
    # Another tenant's note is indistinguishable from a missing one
    stmt = select(Note).where(
        Note.id == note_id.lower(),
        Note.tenant_id == tenant_id,
    )
    note = (await session.execute(stmt)).scalar_one_or_none()
    if note is None:
        raise NotFound("Note not found")
    return note


async def _replace_tags(note: Note, session: AsyncSession) -> None:
    await session.execute(delete(NoteTag).where(NoteTag.note_id == note.id))
    for tag in note.tags:
        session.add(NoteTag(note_id=note.id, tag=tag, tenant_id=note.tenant_id))


async def _to_read(note: Note, session: AsyncSession) -> NoteRead:
    author = await session.get(User, note.created_by)
    return note_to_read(note, author)
