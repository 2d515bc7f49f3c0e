"""
Workflows router: audited CRUD over business workflows.

Wired to:
- InventoryService for persistence and auditing
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from assetwatch.models.enums import Criticality
from assetwatch.models.inventory import Workflow, WorkflowStep
from assetwatch.services import InventoryService, get_inventory_service
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class CreateWorkflowRequest(BaseModel):
    """Create workflow request."""

    name: str = Field(..., min_length=1)
    criticality: Criticality = Criticality.MEDIUM
    steps: list[WorkflowStep] = Field(default_factory=list)
    business_process: str = ""
    description: Optional[str] = None
    owner: Optional[str] = None


class UpdateWorkflowRequest(BaseModel):
    """Partial workflow update. Sending ``steps`` replaces all steps."""

    name: Optional[str] = Field(default=None, min_length=1)
    criticality: Optional[Criticality] = None
    steps: Optional[list[WorkflowStep]] = None
    business_process: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None


@router.get("/")
async def list_workflows(service: InventoryService = Depends(get_inventory_service)):
    workflows = service.list_workflows()
    return {
        "success": True,
        "data": [w.model_dump(mode="json") for w in workflows],
    }


@router.get("/{workflow_id}")
async def get_workflow(
    workflow_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    workflow = service.get_workflow(workflow_id)
    return {"success": True, "data": workflow.model_dump(mode="json")}


@router.post("/", status_code=201)
async def create_workflow(
    request: CreateWorkflowRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    logger.info("workflow_create", name=request.name, steps=len(request.steps))

    workflow = service.create_workflow(
        Workflow(
            name=request.name,
            criticality=request.criticality,
            steps=request.steps,
            business_process=request.business_process,
            description=request.description,
            owner=request.owner,
        )
    )
    return {"success": True, "data": workflow.model_dump(mode="json")}


@router.patch("/{workflow_id}")
async def update_workflow(
    workflow_id: str,
    request: UpdateWorkflowRequest,
    service: InventoryService = Depends(get_inventory_service),
):
    updates = request.model_dump(exclude_unset=True)
    workflow = service.update_workflow(workflow_id, updates)
    return {"success": True, "data": workflow.model_dump(mode="json")}


@router.delete("/{workflow_id}")
async def delete_workflow(
    workflow_id: str,
    service: InventoryService = Depends(get_inventory_service),
):
    service.delete_workflow(workflow_id)
    return {"success": True, "data": {"workflow_id": workflow_id}}
