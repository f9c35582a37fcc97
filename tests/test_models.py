"""Tests for shared model helpers and column types."""

from datetime import timedelta

import pytest
from sqlmodel import select

from notes_app.models.base import new_object_id, utcnow
from notes_app.models.note import Note
from notes_app.models.tenant import Tenant
from notes_app.models.user import User


def test_utcnow_is_timezone_aware():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


@pytest.mark.parametrize("table, column", [
    (Tenant, "created_at"),
    (Tenant, "updated_at"),
    (User, "created_at"),
    (User, "last_login"),
    (Note, "updated_at"),
])
def test_timestamp_columns_store_timezone(table, column):
    assert table.__table__.c[column].type.timezone is True


def test_object_ids_are_24_hex():
    oid = new_object_id()
    assert len(oid) == 24
    int(oid, 16)


@pytest.mark.asyncio
async def test_timestamps_round_trip_through_insert(session):
    """Rows with aware timestamps insert and reload without error."""
    tenant = Tenant(name="Clock Co", slug="clock")
    session.add(tenant)
    await session.commit()

    loaded = (await session.execute(select(Tenant).where(Tenant.slug == "clock"))).scalar_one()
    assert loaded.created_at is not None
    assert loaded.updated_at >= loaded.created_at
