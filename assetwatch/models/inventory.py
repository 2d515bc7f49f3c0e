"""
Inventory models: components, dependencies and business workflows.

These are the snapshot records the impact engine consumes. The engine never
mutates them; all writes go through the storage layer, which validates the
enum-typed fields here at the boundary.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from assetwatch.utils.timestamps import to_naive_utc

from .enums import ComponentStatus, ComponentType, Criticality, DependencyType


class Component(BaseModel):
    """
    A tracked IT asset: one node of the dependency graph.

    Attributes:
        id: Globally unique identifier, never reused
        name: Display name
        type: Asset kind
        status: Externally asserted health status
        criticality: Business criticality of the asset
        last_updated: When any field last changed
        metadata: Free-form key/value annotations
        description: Optional long description
        location: Optional physical or logical location
        owner: Optional owning team or person
        vendor: Optional vendor name
        helpdesk_email: Optional support contact
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier for this component",
    )
    name: str = Field(description="Display name of the component")
    type: ComponentType = Field(description="Asset kind")
    status: ComponentStatus = Field(
        default=ComponentStatus.ONLINE, description="Current health status"
    )
    criticality: Criticality = Field(
        default=Criticality.MEDIUM, description="Business criticality"
    )
    last_updated: datetime = Field(
        default_factory=datetime.utcnow, description="When the component last changed"
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Free-form annotations"
    )
    description: Optional[str] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    vendor: Optional[str] = None
    helpdesk_email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        """Ensure component name is not blank."""
        if not v or not v.strip():
            raise ValueError("Component name must not be empty")
        return v.strip()

    @field_validator("last_updated")
    @classmethod
    def normalize_last_updated(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "id": "srv-db-01",
                "name": "Primary PostgreSQL",
                "type": "database",
                "status": "offline",
                "criticality": "critical",
                "last_updated": "2026-02-10T14:30:00Z",
                "metadata": {"cluster": "eu-west-1a"},
                "owner": "platform-team",
            }
        }


class Dependency(BaseModel):
    """
    A directed dependency edge between two components.

    The engine builds forward adjacency ``source_id -> target_id``: a failure
    of the source propagates to the target and transitively to the
    target's own targets.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier for this dependency",
    )
    source_id: str = Field(description="Component the impact flows from")
    target_id: str = Field(description="Component the impact flows to")
    type: DependencyType = Field(
        default=DependencyType.REQUIRES, description="Relationship kind"
    )
    criticality: Criticality = Field(
        default=Criticality.MEDIUM, description="Criticality of the relationship"
    )
    description: Optional[str] = None
    last_updated: Optional[datetime] = None

    @field_validator("last_updated")
    @classmethod
    def normalize_last_updated(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class WorkflowStep(BaseModel):
    """
    One unit of a business process.

    A step is impacted when any of its primary components is impacted. Its
    alternative components decide the severity: an online alternative makes
    the impact recoverable.

    ``primary_component_id`` is the deprecated single-primary field kept for
    reading older records; when set it counts as an additional primary id.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: Optional[str] = None
    primary_component_id: Optional[str] = None
    primary_component_ids: list[str] = Field(default_factory=list)
    alternative_component_ids: list[str] = Field(default_factory=list)
    fallback_workflow_id: Optional[str] = None
    order: int = 0

    def all_primary_ids(self) -> list[str]:
        """Primary ids including the legacy single field, legacy first."""
        ids = [self.primary_component_id] if self.primary_component_id else []
        return ids + list(self.primary_component_ids)


class Workflow(BaseModel):
    """
    A multi-step business workflow built on top of IT components.

    Attributes:
        id: Unique identifier
        name: Display name
        criticality: Business criticality of the workflow
        steps: Ordered steps
        business_process: Business process this workflow belongs to
        description: Optional long description
        owner: Optional owning team
        last_updated: When the workflow last changed
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    criticality: Criticality = Criticality.MEDIUM
    steps: list[WorkflowStep] = Field(default_factory=list)
    business_process: str = ""
    description: Optional[str] = None
    owner: Optional[str] = None
    last_updated: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("last_updated")
    @classmethod
    def normalize_last_updated(cls, v: datetime) -> datetime:
        return to_naive_utc(v)
