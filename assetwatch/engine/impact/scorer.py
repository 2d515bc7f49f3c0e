"""
Impact Scorer: business impact score and risk classification.

The score is an additive heuristic over the size and shape of the
downstream cascade and the workflows it breaks, multiplied by the root
component's criticality:

    direct    = |direct impacts|   x 12
    indirect  = |indirect impacts| x 8
    workflow  = |affected workflows| x 20
    step      = |error steps| x 5
    chain     = avg depth of indirect nodes at depth >= 2 x 5 + max depth x 3
    breadth   = |impacted| x 2

    score = round_half_up((direct + indirect + workflow + step + chain + breadth)
                          x multiplier)

Risk thresholds on the final score (inclusive lower bounds):
- CRITICAL: >= 150
- HIGH: >= 90
- MEDIUM: >= 45
- LOW: below 45

Weights and thresholds are fixed; dashboards compare scores across
releases.

Version: impact_score_v1
"""

import math
from collections.abc import Iterable, Mapping, Sequence

import structlog

from assetwatch.models.enums import Criticality, RiskLevel, StepSeverity
from assetwatch.models.impact import AffectedStep, ScoreBreakdown

logger = structlog.get_logger()


DIRECT_WEIGHT = 12
INDIRECT_WEIGHT = 8
WORKFLOW_WEIGHT = 20
ERROR_STEP_WEIGHT = 5
AVG_DEPTH_WEIGHT = 5
MAX_DEPTH_WEIGHT = 3
BREADTH_WEIGHT = 2

# Indirect nodes shallower than this do not count toward the average depth
MIN_CHAIN_DEPTH = 2

CRITICALITY_MULTIPLIERS = {
    Criticality.CRITICAL: 2.0,
    Criticality.HIGH: 1.5,
}

# Checked in order, first match wins
RISK_THRESHOLDS = [
    (150, RiskLevel.CRITICAL),
    (90, RiskLevel.HIGH),
    (45, RiskLevel.MEDIUM),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (83.5 -> 84)."""
    return int(math.floor(value + 0.5))


class ImpactScorer:
    """
    Computes the business impact score of one root component.

    Stateless; holds only a logger.

    Example:
        >>> scorer = ImpactScorer()
        >>> breakdown, score = scorer.score_impact(
        ...     direct_ids=["b", "c"], indirect_ids=["d"], impacted_ids=["b", "c", "d"],
        ...     depths={"b": 1, "c": 1, "d": 2}, affected_workflow_count=0,
        ...     affected_steps=[], root_criticality=Criticality.LOW,
        ... )
        >>> score
        54
        >>> scorer.classify_risk(score)
        <RiskLevel.MEDIUM: 'medium'>
    """

    def __init__(self):
        self.logger = structlog.get_logger()

    def score_impact(
        self,
        direct_ids: Sequence[str],
        indirect_ids: Sequence[str],
        impacted_ids: Sequence[str],
        depths: Mapping[str, int],
        affected_workflow_count: int,
        affected_steps: Iterable[AffectedStep],
        root_criticality: Criticality,
    ) -> tuple[ScoreBreakdown, int]:
        """
        Compute the score breakdown and the rounded business impact score.

        Args:
            direct_ids: Immediate forward neighbours of the root
            indirect_ids: Reachable nodes that are not direct neighbours
            impacted_ids: All reachable nodes except the root
            depths: Shortest-path depth per reached node (root may be
                included at depth 0)
            affected_workflow_count: Workflows with at least one error step
            affected_steps: Every impacted workflow step
            root_criticality: Criticality of the root component

        Returns:
            Tuple of (ScoreBreakdown, business_impact_score)
        """
        error_steps = sum(
            1 for s in affected_steps if s.severity == StepSeverity.ERROR
        )

        deep_indirect = [
            depths[n]
            for n in indirect_ids
            if depths.get(n, 0) >= MIN_CHAIN_DEPTH
        ]
        avg_indirect_depth = (
            sum(deep_indirect) / len(deep_indirect) if deep_indirect else 0.0
        )
        max_depth = max(depths.values(), default=0)

        direct_score = len(direct_ids) * DIRECT_WEIGHT
        indirect_score = len(indirect_ids) * INDIRECT_WEIGHT
        workflow_score = affected_workflow_count * WORKFLOW_WEIGHT
        step_score = error_steps * ERROR_STEP_WEIGHT
        chain_score = avg_indirect_depth * AVG_DEPTH_WEIGHT + max_depth * MAX_DEPTH_WEIGHT
        breadth_score = len(impacted_ids) * BREADTH_WEIGHT

        raw_score = (
            direct_score
            + indirect_score
            + workflow_score
            + step_score
            + chain_score
            + breadth_score
        )
        multiplier = CRITICALITY_MULTIPLIERS.get(root_criticality, 1.0)
        business_impact_score = round_half_up(raw_score * multiplier)

        breakdown = ScoreBreakdown(
            direct_score=direct_score,
            indirect_score=indirect_score,
            workflow_score=workflow_score,
            step_score=step_score,
            avg_indirect_depth=avg_indirect_depth,
            max_depth=max_depth,
            chain_score=chain_score,
            breadth_score=breadth_score,
            raw_score=raw_score,
            criticality_multiplier=multiplier,
        )

        self.logger.debug(
            "impact_scored",
            raw_score=raw_score,
            multiplier=multiplier,
            business_impact_score=business_impact_score,
        )

        return breakdown, business_impact_score

    def classify_risk(self, business_impact_score: int) -> RiskLevel:
        """
        Classify a business impact score into a risk level.

        Uses a waterfall over RISK_THRESHOLDS: CRITICAL first, then HIGH,
        then MEDIUM. Anything below is LOW.
        """
        for threshold, level in RISK_THRESHOLDS:
            if business_impact_score >= threshold:
                return level
        return RiskLevel.LOW
