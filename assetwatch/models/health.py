"""
Inventory health models: the current effective-health snapshot and the
hourly health trend reconstructed from the audit log.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import HealthBand


class HealthSnapshot(BaseModel):
    """
    Effective health of the inventory at one instant.

    "Effective" counts treat a component impacted by an offline cascade as
    down even if its own status is online.
    """

    total_components: int = Field(ge=0)
    online_count: int = Field(default=0, ge=0)
    warning_count: int = Field(default=0, ge=0)
    offline_count: int = Field(default=0, ge=0)
    maintenance_count: int = Field(default=0, ge=0)
    effective_online_count: int = Field(default=0, ge=0)
    effective_offline_count: int = Field(default=0, ge=0)
    impacted_component_ids: list[str] = Field(default_factory=list)
    network_health: float = Field(default=0.0, ge=0.0, le=100.0)
    total_dependencies: int = Field(default=0, ge=0)
    critical_paths: int = Field(default=0, ge=0)
    total_workflows: int = Field(default=0, ge=0)
    business_processes: int = Field(default=0, ge=0)


class HealthTrendPoint(BaseModel):
    """One hourly sample of effective health."""

    timestamp: datetime = Field(description="Start of the sampled hour")
    value: float = Field(ge=0.0, le=100.0, description="Effective health percent")
    label: str
    status: HealthBand
