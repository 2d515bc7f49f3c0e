"""
Dashboard alerts router.

Wired to:
- InventoryService for the current inventory snapshot
- AuditService for the status history used to date root alerts
- AlertGenerator for alert derivation and ordering
"""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends

from assetwatch.config import get_settings
from assetwatch.engine.monitors import AlertGenerator
from assetwatch.models.enums import AlertSeverity, AuditEntityType
from assetwatch.services import (
    AuditService,
    InventoryService,
    get_audit_service,
    get_inventory_service,
)
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/")
async def list_alerts(
    severity: Optional[AlertSeverity] = None,
    service: InventoryService = Depends(get_inventory_service),
    audit: AuditService = Depends(get_audit_service),
):
    """
    Current alerts, most severe first, then newest first.

    Alerts are regenerated on every call from the inventory snapshot.
    """
    settings = get_settings()
    now = datetime.utcnow()

    components, dependencies, _ = service.snapshot()
    logs = audit.get_logs(
        entity_type=AuditEntityType.COMPONENT,
        from_date=now - timedelta(hours=settings.alert_log_window_hours),
        to_date=now,
    )

    alerts = AlertGenerator().generate_alerts(
        components, dependencies, audit_logs=logs, as_of=now
    )
    if severity is not None:
        alerts = [a for a in alerts if a.severity == severity]

    return {
        "success": True,
        "data": [a.model_dump(mode="json") for a in alerts],
        "total": len(alerts),
    }
