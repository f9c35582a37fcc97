"""User model — belongs to a tenant."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from notes_app.models.base import ApiModel, TimestampMixin, new_object_id
from notes_app.models.tenant import Tenant, TenantSummary


class UserRole(StrEnum):
    ADMIN = "admin"
    MEMBER = "member"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    tenant_id: str = Field(foreign_key="tenants.id", nullable=False, index=True, max_length=24)
    # Unique across all tenants, stored lowercased
    email: str = Field(max_length=320, unique=True, nullable=False, index=True)
    password_hash: str = Field(nullable=False)
    role: UserRole = Field(default=UserRole.MEMBER)
    is_active: bool = Field(default=True)
    last_login: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def is_member_or_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.MEMBER)


# ── Pydantic schemas ─────────────────────────────────────────

class UserProfile(ApiModel):
    first_name: str
    last_name: str


class UserRead(ApiModel):
    """Outward view of a user; the password hash is never included."""
    id: str
    email: str
    role: UserRole
    profile: UserProfile
    last_login: datetime | None = None
    tenant: TenantSummary


class AuthorRead(ApiModel):
    id: str
    email: str
    first_name: str
    last_name: str


def user_to_read(user: User, tenant: Tenant) -> UserRead:
    return UserRead(
        id=user.id,
        email=user.email,
        role=user.role,
        profile=UserProfile(first_name=user.first_name, last_name=user.last_name),
        last_login=user.last_login,
        tenant=TenantSummary.model_validate(tenant),
    )
