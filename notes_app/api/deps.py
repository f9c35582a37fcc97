"""FastAPI dependencies for authentication, role gates and query parsing."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_app.core.database import get_session
from notes_app.core.errors import Forbidden, Unauthenticated
from notes_app.core.security import decode_jwt
from notes_app.models.tenant import Tenant
from notes_app.models.user import User
from notes_app.services.note_query import NoteQuery

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401, not 403
bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext:
    """Resolved identity carried through a request."""

    __slots__ = ("user", "tenant")

    def __init__(self, user: User, tenant: Tenant) -> None:
        self.user = user
        self.tenant = tenant

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def tenant_id(self) -> str:
        return self.tenant.id


def _subject_from_token(token: str) -> str:
    try:
        payload = decode_jwt(token)
    except ExpiredSignatureError as exc:
        raise Unauthenticated("Token expired") from exc
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise Unauthenticated("Invalid token") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise Unauthenticated("Invalid token")
    return subject


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AuthContext:
    """Resolve a bearer JWT to the acting user and their tenant.

    Inactive users, and users whose tenant is missing or inactive, are
    treated as if they did not exist.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Access token required")

    user_id = _subject_from_token(credentials.credentials)

    user = await session.get(User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated("Invalid or inactive user/tenant")

    tenant = await session.get(Tenant, user.tenant_id)
    if tenant is None or not tenant.is_active:
        raise Unauthenticated("Invalid or inactive user/tenant")

    return AuthContext(user=user, tenant=tenant)


async def require_admin(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> AuthContext:
    if not auth.user.is_admin():
        raise Forbidden("Admin access required")
    return auth


async def require_member(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> AuthContext:
    if not auth.user.is_member_or_admin():
        raise Forbidden("Member access required")
    return auth


def note_query(request: Request) -> NoteQuery:
    return NoteQuery.parse(request.query_params)


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
AdminAuth = Annotated[AuthContext, Depends(require_admin)]
MemberAuth = Annotated[AuthContext, Depends(require_member)]
Session = Annotated[AsyncSession, Depends(get_session)]
NotesQuery = Annotated[NoteQuery, Depends(note_query)]
