"""Tenant info, Pro upgrade and note statistics."""

import logging
from typing import Annotated

from fastapi import APIRouter, Path
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notes_app.api.deps import AdminAuth, Auth, AuthContext, Session
from notes_app.core.errors import Forbidden, NotFound
from notes_app.models.base import ApiModel, DataResponse, MessageDataResponse
from notes_app.models.note import Note, Priority
from notes_app.models.tenant import SLUG_PATTERN, Subscription, Tenant, TenantRead
from notes_app.services.subscription import (
    can_create_note,
    count_notes,
    note_limit,
    upgrade_to_pro,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["tenants"])

Slug = Annotated[str, Path(pattern=SLUG_PATTERN)]

TOP_CATEGORIES = 10


# ── Schemas ──────────────────────────────────────────────────

class TenantData(ApiModel):
    tenant: TenantRead


class PriorityCount(ApiModel):
    priority: Priority
    count: int


class CategoryCount(ApiModel):
    category: str
    count: int


class TenantStats(ApiModel):
    total_notes: int
    notes_by_priority: list[PriorityCount]
    notes_by_category: list[CategoryCount]
    subscription: Subscription
    note_limit: int | str
    can_create_note: bool


class StatsData(ApiModel):
    stats: TenantStats


# ── Routes ───────────────────────────────────────────────────

@router.get("/{slug}", response_model=DataResponse[TenantData])
async def get_tenant(slug: Slug, _auth: Auth, session: Session) -> DataResponse[TenantData]:
    """Tenant details with its note count and quota; any signed-in user may read them."""
    tenant = await _get_tenant(slug, session)
    return DataResponse[TenantData](data=TenantData(tenant=await _to_read(tenant, session)))


@router.post("/{slug}/upgrade", response_model=MessageDataResponse[TenantData])
async def upgrade_tenant(
    slug: Slug,
    auth: AdminAuth,
    session: Session,
) -> MessageDataResponse[TenantData]:
    tenant = await _get_own_tenant(slug, auth, session)
    tenant = await upgrade_to_pro(session, tenant)
    return MessageDataResponse[TenantData](
        message="Tenant upgraded to Pro successfully",
        data=TenantData(tenant=await _to_read(tenant, session)),
    )


@router.get("/{slug}/stats", response_model=DataResponse[StatsData])
async def get_tenant_stats(
    slug: Slug,
    auth: AdminAuth,
    session: Session,
) -> DataResponse[StatsData]:
    """Note counts grouped by priority and by category (top 10)."""
    tenant = await _get_own_tenant(slug, auth, session)

    by_priority = await session.execute(
        select(Note.priority, func.count())
        .where(Note.tenant_id == tenant.id)
        .group_by(Note.priority)
        .order_by(Note.priority)
    )

    count_col = func.count().label("count")
    by_category = await session.execute(
        select(Note.category, count_col)
        .where(Note.tenant_id == tenant.id, Note.category != "")
        .group_by(Note.category)
        .order_by(count_col.desc(), Note.category.asc())  # type: ignore[union-attr]
        .limit(TOP_CATEGORIES)
    )

    stats = TenantStats(
        total_notes=await count_notes(session, tenant.id),
        notes_by_priority=[
            PriorityCount(priority=priority, count=count)
            for priority, count in by_priority.all()
        ],
        notes_by_category=[
            CategoryCount(category=category, count=count)
            for category, count in by_category.all()
        ],
        subscription=tenant.subscription,
        note_limit=note_limit(tenant),
        can_create_note=await can_create_note(session, tenant),
    )
    return DataResponse[StatsData](data=StatsData(stats=stats))


# ── Internal helpers ─────────────────────────────────────────

async def _get_tenant(slug: str, session: AsyncSession) -> Tenant:
    stmt = select(Tenant).where(Tenant.slug == slug, Tenant.is_active == True)  # noqa: E712
    tenant = (await session.execute(stmt)).scalar_one_or_none()
    if tenant is None:
        raise NotFound("Tenant not found")
    return tenant


async def _get_own_tenant(slug: str, auth: AuthContext, session: AsyncSession) -> Tenant:
    """Look up an active tenant by slug; only the caller's own is allowed."""
    tenant = await _get_tenant(slug, session)
    if tenant.id != auth.tenant_id:
        logger.warning("User %s denied access to tenant %s", auth.user_id, slug)
        raise Forbidden("Access denied")
    return tenant


async def _to_read(tenant: Tenant, session: AsyncSession) -> TenantRead:
    return TenantRead(
        id=tenant.id,
        name=tenant.name,
        slug=tenant.slug,
        subscription=tenant.subscription,
        is_active=tenant.is_active,
        created_at=tenant.created_at,
        updated_at=tenant.updated_at,
        note_count=await count_notes(session, tenant.id),
        note_limit=note_limit(tenant),
        can_create_note=await can_create_note(session, tenant),
    )
