"""Import all models so SQLModel.metadata picks them up."""

from notes_app.models.note import (
    Note,
    NoteCreate,
    NoteRead,
    NoteTag,
    NoteUpdate,
    Priority,
)
from notes_app.models.tenant import Subscription, Tenant, TenantRead, TenantSummary
from notes_app.models.user import AuthorRead, User, UserProfile, UserRead, UserRole

__all__ = [
    "AuthorRead",
    "Note",
    "NoteCreate",
    "NoteRead",
    "NoteTag",
    "NoteUpdate",
    "Priority",
    "Subscription",
    "Tenant",
    "TenantRead",
    "TenantSummary",
    "User",
    "UserProfile",
    "UserRead",
    "UserRole",
]
