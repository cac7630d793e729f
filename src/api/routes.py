"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from src.config import get_settings
from src.services.session_store import get_session_store

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Status, timestamp in ISO8601 format, and backing-service health
    """
    from src.database import health_check as db_health_check

    db_healthy = await db_health_check()
    store_healthy = await get_session_store().ping()

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "healthy" if db_healthy else "unhealthy",
        "sessionStore": (
            f"{get_settings().session_backend}:"
            f"{'healthy' if store_healthy else 'unavailable'}"
        ),
    }
