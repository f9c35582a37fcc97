"""API router aggregation."""

from fastapi import APIRouter

from notes_app.api.v1.auth import router as auth_router
from notes_app.api.v1.health import router as health_router
from notes_app.api.v1.notes import router as notes_router
from notes_app.api.v1.tenants import router as tenants_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(notes_router)
api_router.include_router(tenants_router)
