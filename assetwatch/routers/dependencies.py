"""
Dependencies router: validated, audited CRUD over dependency edges.

Wired to:
- InventoryService for persistence and auditing
- DependencyValidator (through the service) for self-loop, duplicate and
  cycle checks; failures surface as HTTP 422
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from assetwatch.models.enums import Criticality, DependencyType
from assetwatch.models.inventory import Dependency
from assetwatch.services import InventoryService, get_inventory_service
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class CreateDependencyRequest(BaseModel):
    """Create dependency request. Impact flows from source to target."""

    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
    type: DependencyType = DependencyType.REQUIRES
    criticality: Criticality = Criticality.MEDIUM
    description: Optional[str] = None


class UpdateDependencyRequest(BaseModel):
    """Partial dependency update."""

    source_id: Optional[str] = Field(default=None, min_length=1)
    target_id: Optional[str] = Field(default=None, min_length=1)
    type: Optional[DependencyType] = None
    criticality: Optional[Criticality] = None
    description: Optional[str] = None


@router.get("/")
async def list_dependencies(
    component_id: Optional[str] = None,
    service: InventoryService = Depends(get_inventory_service),
):
    """List dependency edges, optionally only those touching one component."""
    dependencies = service.list_dependencies(component_id=component_id)
    return {
        "success": True,
        "data": [d.model_dump(mode="json") for d in dependencies],
    }


@router.get("/{dependency_id}")
async def get_dependency(
    dependency_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    dependency = service.get_dependency(dependency_id)
    return {"success": True, "data": dependency.model_dump(mode="json")}


@router.post("/", status_code=201)
async def create_dependency(
    request: CreateDependencyRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """
    Create a dependency edge.

    The response carries advisory type warnings (e.g. a database that
    "requires" an api); they never block the write.
    """
    logger.info(
        "dependency_create",
        source_id=request.source_id,
        target_id=request.target_id,
        type=request.type.value,
    )

    dependency = service.create_dependency(Dependency(**request.model_dump()))
    return {
        "success": True,
        "data": dependency.model_dump(mode="json"),
        "warnings": service.dependency_type_warnings(dependency),
    }


@router.patch("/{dependency_id}")
async def update_dependency(
    dependency_id: str,
    request: UpdateDependencyRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    updates = request.model_dump(exclude_unset=True)
    dependency = service.update_dependency(dependency_id, updates)
    return {
        "success": True,
        "data": dependency.model_dump(mode="json"),
        "warnings": service.dependency_type_warnings(dependency),
    }


@router.delete("/{dependency_id}")
async def delete_dependency(
    dependency_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    service.delete_dependency(dependency_id)
    return {"success": True, "data": {"dependency_id": dependency_id}}
