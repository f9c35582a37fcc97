"""Health endpoint — liveness plus database connectivity."""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_app.api.deps import Session
from notes_app.core.config import APP_VERSION, get_settings
from notes_app.models.base import ApiModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["system"])

settings = get_settings()
_start_time = time.time()


class DatabaseHealth(ApiModel):
    status: str  # "connected" or "disconnected"
    latency_ms: int | None = None


class HealthResponse(ApiModel):
    status: str  # "ok" or "degraded"
    timestamp: datetime
    uptime: float
    database: DatabaseHealth
    environment: str
    version: str


@router.get("", response_model=HealthResponse)
async def health_check(session: Session) -> HealthResponse:
    """Unauthenticated liveness probe; reports degraded when the DB is down."""
    db = await _check_database(session)
    return HealthResponse(
        status="ok" if db.status == "connected" else "degraded",
        timestamp=datetime.now(timezone.utc),
        uptime=round(time.time() - _start_time, 3),
        database=db,
        environment=settings.environment,
        version=APP_VERSION,
    )


async def _check_database(session: AsyncSession) -> DatabaseHealth:
    try:
        t0 = time.monotonic()
        await session.execute(text("SELECT 1"))
        latency = int((time.monotonic() - t0) * 1000)
        return DatabaseHealth(status="connected", latency_ms=latency)
    except (SQLAlchemyError, OSError):
        # Engine errors stay in the server log
        logger.exception("Database health check failed")
        return DatabaseHealth(status="disconnected")
