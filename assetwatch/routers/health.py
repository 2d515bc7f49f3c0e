"""
Inventory health router.

Wired to:
- InventoryService for the current inventory snapshot
- AuditService for the status history the trend is rebuilt from
- HealthScorer for the effective health snapshot and hourly trend
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from assetwatch.config import get_settings
from assetwatch.engine.monitors import HealthScorer
from assetwatch.models.enums import AuditEntityType
from assetwatch.services import (
    AuditService,
    InventoryService,
    get_audit_service,
    get_inventory_service,
)
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/snapshot")
async def health_snapshot(service: InventoryService = Depends(get_inventory_service)):
    """Effective health right now, counting offline cascades as down."""
    components, dependencies, workflows = service.snapshot()
    snapshot = HealthScorer().compute_snapshot(components, dependencies, workflows)
    return {"success": True, "data": snapshot.model_dump(mode="json")}


@router.get("/trend")
async def health_trend(
    hours: Optional[int] = Query(default=None, ge=1, le=168),
    service: InventoryService = Depends(get_inventory_service),
    audit: AuditService = Depends(get_audit_service),
):
    """Hourly effective health over the trailing window, oldest first."""
    hours = hours or get_settings().health_trend_hours
    now = datetime.utcnow()

    components, dependencies, _ = service.snapshot()
    logs = audit.get_logs(entity_type=AuditEntityType.COMPONENT, to_date=now)

    points = HealthScorer().compute_trend(
        components, dependencies, logs, hours=hours, now=now
    )
    return {
        "success": True,
        "data": [p.model_dump(mode="json") for p in points],
        "hours": hours,
    }
