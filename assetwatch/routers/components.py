"""
Components router: audited CRUD over IT assets.

Wired to:
- InventoryService for persistence, auditing and cascade deletes
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from assetwatch.models.enums import ComponentStatus, ComponentType, Criticality
from assetwatch.models.inventory import Component
from assetwatch.services import InventoryService, get_inventory_service
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class CreateComponentRequest(BaseModel):
    """Create component request."""

    name: str = Field(..., min_length=1, description="Display name")
    type: ComponentType
    status: ComponentStatus = ComponentStatus.ONLINE
    criticality: Criticality = Criticality.MEDIUM
    metadata: dict[str, Any] = Field(default_factory=dict)
    description: Optional[str] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    vendor: Optional[str] = None
    helpdesk_email: Optional[str] = None


class UpdateComponentRequest(BaseModel):
    """Partial component update; only fields that are sent are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[ComponentType] = None
    status: Optional[ComponentStatus] = None
    criticality: Optional[Criticality] = None
    metadata: Optional[dict[str, Any]] = None
    description: Optional[str] = None
    location: Optional[str] = None
    owner: Optional[str] = None
    vendor: Optional[str] = None
    helpdesk_email: Optional[str] = None


@router.get("/")
async def list_components(
    status: Optional[ComponentStatus] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    """List components in creation order, optionally filtered by status."""
    components = service.list_components()
    if status is not None:
        components = [c for c in components if c.status == status]

    return {
        "success": True,
        "data": [c.model_dump(mode="json") for c in components],
    }


@router.get("/{component_id}")
async def get_component(
    component_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    """Get one component."""
    component = service.get_component(component_id)
    return {"success": True, "data": component.model_dump(mode="json")}


@router.post("/", status_code=201)
async def create_component(
    request: CreateComponentRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """Create a component."""
    logger.info("component_create", name=request.name, type=request.type.value)

    component = service.create_component(Component(**request.model_dump()))
    return {"success": True, "data": component.model_dump(mode="json")}


@router.patch("/{component_id}")
async def update_component(
    component_id: str,
    request: UpdateComponentRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """Update a component. Status changes feed the health trend and alerts."""
    updates = request.model_dump(exclude_unset=True)
    logger.info("component_update", component_id=component_id, fields=sorted(updates))

    component = service.update_component(component_id, updates)
    return {"success": True, "data": component.model_dump(mode="json")}


@router.delete("/{component_id}")
async def delete_component(
    component_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    """Delete a component together with every dependency touching it."""
    removed = service.delete_component(component_id)
    return {
        "success": True,
        "data": {
            "component_id": component_id,
            "deleted_dependency_ids": removed,
        },
    }
