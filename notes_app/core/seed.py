"""First-run demo data: two free tenants, each with an admin and a member."""

import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from notes_app.core.security import hash_password
from notes_app.models.tenant import Subscription, Tenant
from notes_app.models.user import User, UserRole

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password"

SEED_TENANTS = [
    {"name": "Acme Corp", "slug": "acme"},
    {"name": "Globex Inc", "slug": "globex"},
]


async def seed_initial_data(session: AsyncSession) -> bool:
    """Create demo tenants and users when the tenant table is empty.

    Returns True if anything was written.
    """
    existing = (await session.execute(select(func.count()).select_from(Tenant))).scalar_one()
    if existing:
        logger.info("Data already exists, skipping seed")
        return False

    password_hash = hash_password(SEED_PASSWORD)
    emails = []
    for seed in SEED_TENANTS:
        tenant = Tenant(name=seed["name"], slug=seed["slug"], subscription=Subscription.FREE)
        session.add(tenant)
        await session.flush()

        for prefix, role in (("admin", UserRole.ADMIN), ("user", UserRole.MEMBER)):
            email = f"{prefix}@{seed['slug']}.com"
            session.add(User(
                tenant_id=tenant.id,
                email=email,
                password_hash=password_hash,
                role=role,
            ))
            emails.append(email)

    await session.commit()
    logger.info(
        "Seeded %d tenants and %d users (password: %r): %s",
        len(SEED_TENANTS), len(emails), SEED_PASSWORD, ", ".join(emails),
    )
    return True
