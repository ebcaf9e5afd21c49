"""
Health API Routes
"""
from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from app.config import Settings, get_settings
from app.database import check_database_connection
from app.services.storage_backends import SQLiteUserBackend
from app.services.user_store import UserStore, get_user_store

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe"""
    return {"status": "ok"}


@router.get("/health/integrations")
async def check_integrations(
    settings: Settings = Depends(get_settings),
    store: UserStore = Depends(get_user_store),
) -> dict:
    """Report which external integrations are configured and the active user store."""
    checks = {
        "anthropic": bool(settings.anthropic_api_key and settings.anthropic_api_key.get_secret_value()),
        "lemonsqueezy": settings.payments_configured,
        "webhook_secret": bool(settings.webhook_secret),
    }
    # First access may create the SQLite engine and schema.
    backend = await run_in_threadpool(lambda: store.backend)
    database_ok = None
    if isinstance(backend, SQLiteUserBackend):
        database_ok = await run_in_threadpool(check_database_connection, backend.engine)
    return {
        "integrations": checks,
        "storage_backend": backend.name,
        "database": database_ok,
        "ready": all(checks.values()),
        "missing": [k for k, v in checks.items() if not v],
    }
