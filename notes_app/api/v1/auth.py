"""Authentication endpoints — login, current user, invites and profile."""

import logging
from typing import Annotated

import pydantic
from fastapi import APIRouter, status
from pydantic import EmailStr, StringConstraints, model_validator
from sqlmodel import select

from notes_app.api.deps import AdminAuth, Auth, Session
from notes_app.core.config import get_settings
from notes_app.core.errors import Conflict, Unauthenticated, ValidationFailed
from notes_app.core.security import create_jwt, hash_password, verify_password
from notes_app.models.base import (
    ApiModel,
    DataResponse,
    MessageDataResponse,
    MessageResponse,
    RequestModel,
    utcnow,
)
from notes_app.models.tenant import Tenant, TenantSummary
from notes_app.models.user import User, UserRead, UserRole, user_to_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

settings = get_settings()

Password = Annotated[str, StringConstraints(min_length=6, max_length=100)]
NamePart = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(RequestModel):
    email: EmailStr
    password: Password


class LoginUser(ApiModel):
    id: str
    email: str
    role: UserRole
    tenant: TenantSummary


class LoginResponse(ApiModel):
    success: bool = True
    message: str = "Login successful"
    user: LoginUser
    token: str


class InviteRequest(RequestModel):
    email: EmailStr
    role: UserRole = UserRole.MEMBER


class ProfileUpdate(RequestModel):
    first_name: NamePart | None = None
    last_name: NamePart | None = None

    @model_validator(mode="after")
    def _require_one(self) -> "ProfileUpdate":
        if self.first_name is None and self.last_name is None:
            raise ValueError("At least one of firstName or lastName must be provided")
        return self


class ChangePasswordRequest(RequestModel):
    current_password: str = pydantic.Field(min_length=1)
    new_password: Password


class UserData(ApiModel):
    user: UserRead


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: Session) -> LoginResponse:
    """Authenticate with email + password, receive a 24h bearer token."""
    stmt = select(User).where(
        User.email == body.email.lower(),
        User.is_active == True,  # noqa: E712
    )
    user = (await session.execute(stmt)).scalar_one_or_none()

    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", body.email)
        raise Unauthenticated("Invalid credentials")

    tenant = await session.get(Tenant, user.tenant_id)
    if tenant is None or not tenant.is_active:
        raise Unauthenticated("Account suspended")

    user.last_login = utcnow()
    session.add(user)
    await session.commit()

    return LoginResponse(
        user=LoginUser(
            id=user.id,
            email=user.email,
            role=user.role,
            tenant=TenantSummary.model_validate(tenant),
        ),
        token=create_jwt(subject=user.id),
    )


@router.get("/me", response_model=DataResponse[UserData])
async def get_me(auth: Auth) -> DataResponse[UserData]:
    """Return the current authenticated user and their tenant."""
    return DataResponse[UserData](data=UserData(user=user_to_read(auth.user, auth.tenant)))


@router.post(
    "/invite",
    response_model=MessageDataResponse[UserData],
    status_code=status.HTTP_201_CREATED,
)
async def invite_user(
    body: InviteRequest,
    auth: AdminAuth,
    session: Session,
) -> MessageDataResponse[UserData]:
    """Create a user in the caller's tenant with the default password."""
    email = body.email.lower()

    # Emails are unique across every tenant
    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise Conflict("User already exists")

    user = User(
        tenant_id=auth.tenant_id,
        email=email,
        password_hash=hash_password(settings.invite_default_password),
        role=body.role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("User %s invited to tenant %s as %s", email, auth.tenant.slug, user.role)

    return MessageDataResponse[UserData](
        message="User invited successfully",
        data=UserData(user=user_to_read(user, auth.tenant)),
    )


@router.put("/profile", response_model=MessageDataResponse[UserData])
async def update_profile(
    body: ProfileUpdate,
    auth: Auth,
    session: Session,
) -> MessageDataResponse[UserData]:
    user = auth.user
    if body.first_name is not None:
        user.first_name = body.first_name
    if body.last_name is not None:
        user.last_name = body.last_name

    user.updated_at = utcnow()
    session.add(user)
    await session.commit()
    await session.refresh(user)

    return MessageDataResponse[UserData](
        message="Profile updated successfully",
        data=UserData(user=user_to_read(user, auth.tenant)),
    )


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    auth: Auth,
    session: Session,
) -> MessageResponse:
    user = auth.user
    if not verify_password(body.current_password, user.password_hash):
        raise ValidationFailed("Current password is incorrect")

    user.password_hash = hash_password(body.new_password)
    user.updated_at = utcnow()
    session.add(user)
    await session.commit()

    return MessageResponse(message="Password changed successfully")
