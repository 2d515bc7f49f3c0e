"""
Impact analysis models for the AssetWatch engine.

This module defines the structures produced by the cascading impact
analysis: per-node causal attribution, impacted workflow steps, the score
breakdown, and the per-root impact report.
"""

from pydantic import BaseModel, Field

from .enums import RiskLevel, StepSeverity


class ImpactCause(BaseModel):
    """
    Causal attribution for one node reached by a downstream traversal.

    Attributes:
        cause_id: The node whose outgoing edge discovered this node
        depth: Distance from the traversal root (direct neighbours are 1)
    """

    cause_id: str
    depth: int = Field(ge=1)

    class Config:
        """Pydantic configuration."""

        frozen = True


class AffectedStep(BaseModel):
    """A workflow step whose primary components are impacted."""

    workflow_id: str
    workflow_name: str
    step_id: str
    step_name: str
    reason_component_ids: list[str] = Field(
        description="Primary component ids of the step that are impacted"
    )
    severity: StepSeverity


class ScoreBreakdown(BaseModel):
    """
    Every intermediate term of the business impact score.

    Kept on the result so the rendering layer can explain a score without
    recomputing it.
    """

    direct_score: float = 0.0
    indirect_score: float = 0.0
    workflow_score: float = 0.0
    step_score: float = 0.0
    avg_indirect_depth: float = 0.0
    max_depth: int = 0
    chain_score: float = 0.0
    breadth_score: float = 0.0
    raw_score: float = 0.0
    criticality_multiplier: float = 1.0


class ImpactResult(BaseModel):
    """
    Impact report for a single root component.

    Id lists are in traversal discovery order; the ``*_names`` lists are the
    same entries resolved to component names.

    Attributes:
        component_id: Root component id
        component_name: Root name, or "Unknown" when the id is not known
        direct_impacts: Immediate forward neighbours of the root
        indirect_impacts: Reachable nodes that are not direct neighbours
        impacted_component_ids: All reachable nodes except the root
        affected_workflows: Names of workflows with at least one error step
        affected_workflow_ids: Ids of the same workflows
        affected_steps: Every impacted step, warning or error
        business_impact_score: Rounded weighted score
        risk_level: Classification of the score
        breakdown: Intermediate scoring terms
    """

    component_id: str
    component_name: str
    direct_impacts: list[str] = Field(default_factory=list)
    indirect_impacts: list[str] = Field(default_factory=list)
    impacted_component_ids: list[str] = Field(default_factory=list)
    direct_impact_names: list[str] = Field(default_factory=list)
    indirect_impact_names: list[str] = Field(default_factory=list)
    impacted_components: list[str] = Field(default_factory=list)
    affected_workflows: list[str] = Field(default_factory=list)
    affected_workflow_ids: list[str] = Field(default_factory=list)
    affected_steps: list[AffectedStep] = Field(default_factory=list)
    business_impact_score: int = Field(default=0, ge=0)
    risk_level: RiskLevel = RiskLevel.LOW
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "component_id": "S1",
                "component_name": "Core Switch",
                "direct_impacts": ["S2"],
                "indirect_impacts": ["S3"],
                "impacted_component_ids": ["S2", "S3"],
                "direct_impact_names": ["App Server"],
                "indirect_impact_names": ["Web Portal"],
                "impacted_components": ["App Server", "Web Portal"],
                "affected_workflows": [],
                "affected_workflow_ids": [],
                "affected_steps": [],
                "business_impact_score": 66,
                "risk_level": "medium",
            }
        }
