"""
System status router.

Wired to:
- StorageBackend for a live inventory count (doubles as a connectivity check)
- Settings for the configured analysis defaults
"""

import time

from fastapi import APIRouter

from assetwatch.config import get_settings
from assetwatch.storage import StorageError, get_storage
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()

_started_at = time.monotonic()


@router.get("/health")
async def system_health():
    """
    Readiness: storage reachable, inventory size, active defaults.

    A storage failure degrades the status instead of failing the request.
    """
    settings = get_settings()

    storage_ok = True
    counts = None
    try:
        storage = get_storage()
        counts = {
            "components": len(storage.read_components()),
            "dependencies": len(storage.read_dependencies()),
            "workflows": len(storage.read_workflows()),
        }
    except StorageError as e:
        logger.warning("system_health_storage_unavailable", error=str(e))
        storage_ok = False

    return {
        "success": True,
        "data": {
            "status": "healthy" if storage_ok else "degraded",
            "database": "healthy" if storage_ok else "unavailable",
            "uptime_seconds": round(time.monotonic() - _started_at, 1),
            "inventory": counts,
            "defaults": {
                "health_trend_hours": settings.health_trend_hours,
                "spof_threshold": settings.spof_threshold,
                "audit_max_logs": settings.audit_max_logs,
            },
        },
    }
