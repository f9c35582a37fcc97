"""Shared test fixtures — async SQLite in-memory DB + test client."""

import os

# Settings are cached on first import; point them at SQLite before that happens
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SEED_ON_STARTUP", "false")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

# Import all models so metadata is populated
import notes_app.models  # noqa: E402, F401
from notes_app.core.database import get_session  # noqa: E402
from notes_app.core.security import hash_password  # noqa: E402
from notes_app.main import app  # noqa: E402
from notes_app.models.tenant import Subscription, Tenant  # noqa: E402
from notes_app.models.user import User, UserRole  # noqa: E402

PASSWORD = "password123"


@pytest.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def password_hash() -> str:
    # Argon2 is slow on purpose; hash the shared test password once
    return hash_password(PASSWORD)


@pytest.fixture
def bootstrap(client: AsyncClient, session: AsyncSession, password_hash: str):
    """Factory: create a tenant with an admin and a member, both logged in.

    Returns a dict with the ORM rows and ready-to-use auth headers.
    """

    async def _bootstrap(slug: str, subscription: Subscription = Subscription.FREE) -> dict:
        tenant = Tenant(name=f"{slug} Co", slug=slug, subscription=subscription)
        session.add(tenant)
        await session.flush()

        admin = User(
            tenant_id=tenant.id,
            email=f"admin@{slug}.com",
            password_hash=password_hash,
            role=UserRole.ADMIN,
        )
        member = User(
            tenant_id=tenant.id,
            email=f"member@{slug}.com",
            password_hash=password_hash,
            role=UserRole.MEMBER,
        )
        session.add_all([admin, member])
        await session.commit()

        ctx = {"tenant": tenant, "admin": admin, "member": member}
        for key, user in (("admin", admin), ("member", member)):
            resp = await client.post("/api/auth/login", json={
                "email": user.email,
                "password": PASSWORD,
            })
            assert resp.status_code == 200, resp.text
            ctx[f"{key}_headers"] = {"Authorization": f"Bearer {resp.json()['token']}"}
        return ctx

    return _bootstrap
