"""FastAPI application entrypoint."""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from notes_app.api.v1 import api_router
from notes_app.core.config import APP_NAME, APP_VERSION, get_settings
from notes_app.core.database import async_session_factory, engine, init_db
from notes_app.core.errors import register_exception_handlers
from notes_app.core.logging import setup_logging
from notes_app.core.seed import seed_initial_data

logger = logging.getLogger(__name__)

DASHBOARD_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "dashboard")

_settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    _settings.check_production_safety()

    # Startup: ensure tables exist (use Alembic in production)
    try:
        await init_db()
        if _settings.seed_on_startup:
            async with async_session_factory() as session:
                await seed_initial_data(session)
    except (SQLAlchemyError, OSError):
        logger.exception("Database initialisation failed")
        if _settings.strict_startup:
            raise
    yield
    await engine.dispose()


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="Multi-tenant notes API with free/pro note limits",
    lifespan=lifespan,
)

register_exception_handlers(app)

# ── CORS ─────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── API routes ───────────────────────────────────────────────
app.include_router(api_router)


@app.get("/", tags=["system"])
async def root() -> dict:
    return {
        "status": "running",
        "service": APP_NAME,
        "version": APP_VERSION,
        "endpoints": {
            "health": "/api/health",
            "auth": "/api/auth",
            "notes": "/api/notes",
            "tenants": "/api/tenants",
        },
    }


# ── Dashboard static files ───────────────────────────────────
if os.path.isdir(DASHBOARD_DIR):
    app.mount(
        "/dashboard/css",
        StaticFiles(directory=os.path.join(DASHBOARD_DIR, "css")),
        name="dashboard-css",
    )
    app.mount(
        "/dashboard/js",
        StaticFiles(directory=os.path.join(DASHBOARD_DIR, "js")),
        name="dashboard-js",
    )

    @app.get("/dashboard/{path:path}", include_in_schema=False)
    async def dashboard_spa(request: Request, path: str = "") -> FileResponse:
        """Serve the SPA index.html for all dashboard routes."""
        return FileResponse(os.path.join(DASHBOARD_DIR, "index.html"))

    @app.get("/dashboard", include_in_schema=False)
    async def dashboard_root() -> FileResponse:
        return FileResponse(os.path.join(DASHBOARD_DIR, "index.html"))
