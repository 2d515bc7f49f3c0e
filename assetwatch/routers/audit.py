"""
Audit log router.

Wired to:
- AuditService for filtered reads and activity summaries
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from assetwatch.config import get_settings
from assetwatch.models.enums import AuditAction, AuditEntityType
from assetwatch.services import AuditService, get_audit_service
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/logs")
async def list_audit_logs(
    limit: Optional[int] = Query(default=100, ge=1, le=1000),
    entity_type: Optional[AuditEntityType] = None,
    action: Optional[AuditAction] = None,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    audit: AuditService = Depends(get_audit_service),
):
    """Audit entries matching every given filter, newest first."""
    logs = audit.get_logs(
        limit=limit,
        entity_type=entity_type,
        action=action,
        from_date=from_date,
        to_date=to_date,
    )
    return {
        "success": True,
        "data": [entry.model_dump(mode="json") for entry in logs],
    }


@router.get("/summary")
async def activity_summary(
    days: Optional[int] = Query(default=None, ge=1, le=365),
    audit: AuditService = Depends(get_audit_service),
):
    """Activity totals, per action, per day and top entities."""
    summary = audit.get_activity_summary(days=days or get_settings().audit_summary_days)
    return {"success": True, "data": summary.model_dump(mode="json")}
