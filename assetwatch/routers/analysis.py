"""
Impact analysis router.

Wired to:
- InventoryService for the current inventory snapshot
- ImpactAnalyzer for per-root and ranked impact reports
- AuditService to record each analysis run
"""

from fastapi import APIRouter, Depends

from assetwatch.engine.impact import ImpactAnalyzer
from assetwatch.models.enums import AnalysisScope
from assetwatch.services import (
    AuditService,
    InventoryService,
    get_audit_service,
    get_inventory_service,
)
from assetwatch.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/impact/{component_id}")
async def analyze_component_impact(
    component_id: str,
    service: InventoryService = Depends(get_inventory_service),
    audit: AuditService = Depends(get_audit_service),
):
    """
    Downstream impact of one component going down.

    Unknown ids are not an error: they yield a zeroed "Unknown" report.
    """
    components, dependencies, workflows = service.snapshot()

    result = ImpactAnalyzer().analyze_impact(
        component_id, components, dependencies, workflows
    )
    audit.log_analysis_run(
        "impact",
        component_count=len(components),
        results_count=1,
        target_component=result.component_name,
    )

    return {"success": True, "data": result.model_dump(mode="json")}


@router.get("/results")
async def analysis_results(
    scope: AnalysisScope = AnalysisScope.NON_ONLINE,
    service: InventoryService = Depends(get_inventory_service),
    audit: AuditService = Depends(get_audit_service),
):
    """Impact reports for every component in scope, highest score first."""
    components, dependencies, workflows = service.snapshot()

    results = ImpactAnalyzer().compute_analysis_results(
        components, dependencies, workflows, scope=scope
    )
    audit.log_analysis_run(
        f"results:{scope.value}",
        component_count=len(components),
        results_count=len(results),
    )

    return {
        "success": True,
        "data": [r.model_dump(mode="json") for r in results],
        "scope": scope.value,
    }
