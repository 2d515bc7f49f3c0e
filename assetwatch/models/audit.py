"""
Audit log models.

The audit log is the system's state-change history. The analysis engine
only reads it, to reconstruct what status a component had at a given
instant.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from assetwatch.utils.timestamps import to_naive_utc

from .enums import AuditAction, AuditEntityType


class AuditChanges(BaseModel):
    """Before/after snapshots of an entity for an UPDATE entry."""

    before: Optional[dict[str, Any]] = None
    after: Optional[dict[str, Any]] = None


class AuditLog(BaseModel):
    """
    One audit log entry.

    Attributes:
        id: Unique entry id
        timestamp: When the action happened
        user_id: Acting user (``system-user`` until authentication exists)
        action: Kind of action
        entity_type: Kind of entity acted on
        entity_id: Id of the entity, absent for SYSTEM entries
        entity_name: Display name of the entity
        details: Action-specific context (component status, counts, ...)
        changes: Before/after snapshots for updates
    """

    id: str = Field(default_factory=lambda: f"audit-{uuid4().hex[:12]}")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    user_id: Optional[str] = "system-user"
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: Optional[str] = None
    entity_name: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    changes: Optional[AuditChanges] = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    def recorded_status(self) -> Optional[str]:
        """
        Component status this entry leaves behind.

        Reads ``changes.after.status`` first and falls back to
        ``details.status``; returns None when the entry carries neither.
        """
        if self.changes is not None and self.changes.after:
            status = self.changes.after.get("status")
            if status:
                return str(status)
        status = self.details.get("status")
        return str(status) if status else None

    def previous_status(self) -> Optional[str]:
        """Component status recorded in ``changes.before``, if any."""
        if self.changes is not None and self.changes.before:
            status = self.changes.before.get("status")
            if status:
                return str(status)
        return None


class ActivitySummary(BaseModel):
    """Aggregated audit activity over a trailing window."""

    total_actions: int = 0
    actions_by_type: dict[str, int] = Field(default_factory=dict)
    actions_per_day: dict[str, int] = Field(default_factory=dict)
    top_entities: list[dict[str, Any]] = Field(default_factory=list)
