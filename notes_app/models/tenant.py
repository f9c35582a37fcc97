"""Tenant model — top-level isolation boundary."""

from datetime import datetime
from enum import StrEnum

from sqlmodel import Field, SQLModel

from notes_app.models.base import ApiModel, TimestampMixin, new_object_id

SLUG_PATTERN = r"^[a-z0-9-]{2,50}$"


class Subscription(StrEnum):
    FREE = "free"
    PRO = "pro"


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    name: str = Field(max_length=100, nullable=False)
    # Globally unique; there is no rename operation
    slug: str = Field(max_length=50, unique=True, nullable=False, index=True)
    subscription: Subscription = Field(default=Subscription.FREE)
    is_active: bool = Field(default=True, index=True)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantSummary(ApiModel):
    id: str
    name: str
    slug: str
    subscription: Subscription


class TenantRead(TenantSummary):
    """Tenant with its derived note quota."""
    is_active: bool
    created_at: datetime
    updated_at: datetime
    note_count: int
    note_limit: int | str
    can_create_note: bool
