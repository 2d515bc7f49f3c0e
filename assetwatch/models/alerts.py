"""
Dashboard alert models.

Alerts are derived, memoryless views of the current status snapshot: they
are regenerated on every request and never persisted.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import AlertSeverity, Criticality


class Alert(BaseModel):
    """
    A single dashboard alert.

    Attributes:
        id: Deterministic id derived from the alert kind and component ids
        title: Short headline
        message: Human-readable explanation
        severity: Display severity
        timestamp: When the underlying condition started (or the as-of instant)
        component: Name of the component the alert is about
        criticality: Criticality of that component (or of the dependency paths)
        action_url: Deep link into the inventory UI
        root_component_id: Unhealthy component that seeded this alert, if any
        cause_component_id: Nearest upstream cause for derived alerts
        impacted_components: Names of downstream components (root alerts only)
    """

    id: str
    title: str
    message: str
    severity: AlertSeverity
    timestamp: datetime
    component: str
    criticality: Criticality
    action_url: Optional[str] = None
    root_component_id: Optional[str] = None
    cause_component_id: Optional[str] = None
    impacted_components: list[str] = Field(default_factory=list)

    @field_validator("message")
    @classmethod
    def validate_message_not_empty(cls, v: str) -> str:
        """Ensure alert message is not empty."""
        if not v or not v.strip():
            raise ValueError("Alert message must not be empty")
        return v.strip()

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "id": "impacted-by-offline-srv-db-01-svc-orders",
                "title": "Order Service Impacted",
                "message": "Order Service is impacted by Primary PostgreSQL outage",
                "severity": "critical",
                "timestamp": "2026-02-10T14:35:00Z",
                "component": "Order Service",
                "criticality": "high",
                "action_url": "#components/svc-orders",
                "root_component_id": "srv-db-01",
                "cause_component_id": "srv-db-01",
            }
        }
