"""
Dependency graph validation router.

Wired to:
- InventoryService for the current dependency edges
- DependencyValidator for cycle, single-point-of-failure and
  candidate-edge checks
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from assetwatch.config import get_settings
from assetwatch.engine.validation import DependencyValidator
from assetwatch.models.enums import DependencyType
from assetwatch.models.inventory import Dependency
from assetwatch.services import InventoryService, get_inventory_service
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class CheckDependencyRequest(BaseModel):
    """Candidate edge to check without persisting it."""

    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
    type: DependencyType = DependencyType.REQUIRES


@router.get("/cycles")
async def dependency_cycles(service: InventoryService = Depends(get_inventory_service)):
    """Every dependency cycle, each as a closed path."""
    report = DependencyValidator().detect_all_cycles(service.list_dependencies())
    return {"success": True, "data": report.model_dump(mode="json")}


@router.get("/single-points-of-failure")
async def single_points_of_failure(
    threshold: Optional[int] = Query(default=None, ge=1),
    service: InventoryService = Depends(get_inventory_service),
):
    """Components with high fan-out and at most one upstream."""
    threshold = threshold or get_settings().spof_threshold
    component_ids = DependencyValidator().find_single_points_of_failure(
        service.list_dependencies(), threshold=threshold
    )
    return {
        "success": True,
        "data": component_ids,
        "threshold": threshold,
    }


@router.post("/dependency")
async def check_dependency(
    request: CheckDependencyRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    """Validate a candidate edge and report type warnings; nothing is written."""
    candidate = Dependency(**request.model_dump())
    result = DependencyValidator().validate_dependency(
        candidate, service.list_dependencies()
    )
    return {
        "success": True,
        "data": {
            **result.model_dump(mode="json"),
            "warnings": service.dependency_type_warnings(candidate),
        },
    }
