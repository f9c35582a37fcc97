"""Subscription policy — the free-tier note quota and the Pro upgrade.

The quota is derived from live rows on every call; there is no stored
counter. ``ensure_can_create_note`` followed by an insert is a read then a
write with nothing in between, so two concurrent creates against a free
tenant holding two notes can both pass and leave it with four.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notes_app.core.errors import Conflict, Forbidden
from notes_app.models.base import utcnow
from notes_app.models.note import Note
from notes_app.models.tenant import Subscription, Tenant

logger = logging.getLogger(__name__)

FREE_NOTE_LIMIT = 3
UNLIMITED = "unlimited"

NOTE_LIMIT_MESSAGE = "Note limit reached. Upgrade to Pro for unlimited notes."


async def count_notes(session: AsyncSession, tenant_id: str) -> int:
    """All notes owned by the tenant, archived ones included."""
    stmt = select(func.count()).select_from(Note).where(Note.tenant_id == tenant_id)
    return (await session.execute(stmt)).scalar_one()


def note_limit(tenant: Tenant) -> int | str:
    if tenant.subscription == Subscription.PRO:
        return UNLIMITED
    return FREE_NOTE_LIMIT


async def can_create_note(session: AsyncSession, tenant: Tenant) -> bool:
    if tenant.subscription == Subscription.PRO:
        return True
    return await count_notes(session, tenant.id) < FREE_NOTE_LIMIT


async def ensure_can_create_note(session: AsyncSession, tenant: Tenant) -> None:
    if not await can_create_note(session, tenant):
        logger.info("Tenant %s hit the free note limit", tenant.slug)
        raise Forbidden(NOTE_LIMIT_MESSAGE)


async def upgrade_to_pro(session: AsyncSession, tenant: Tenant) -> Tenant:
    """One-way free → pro transition; repeating it is a Conflict."""
    if tenant.subscription == Subscription.PRO:
        raise Conflict("Tenant is already on Pro plan")

    tenant.subscription = Subscription.PRO
    tenant.updated_at = utcnow()
    session.add(tenant)
    await session.commit()
    await session.refresh(tenant)
    logger.info("Tenant %s upgraded to Pro", tenant.slug)
    return tenant
