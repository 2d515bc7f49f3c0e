"""
Impact Analyzer: per-root cascading impact reports.

For one root component the analyzer:
1. Builds the full forward adjacency (no visibility scope)
2. Computes shortest-path depths by BFS, then relaxes them to a fixpoint
3. Splits the reachable set into direct and indirect impacts
4. Maps impacted components onto workflow steps (warning vs error)
5. Delegates scoring and risk classification to ImpactScorer

Unknown component ids anywhere in the inputs (dangling dependency
endpoints, stale step references) contribute nothing: they are never
reported as impacted. An unknown root yields a zeroed "Unknown" result.

The analyzer is stateless; every call recomputes from the snapshot it is
given.

Version: impact_analyzer_v1
"""

from collections import deque
from collections.abc import Sequence
from typing import Optional

import structlog

from assetwatch.models.enums import AnalysisScope, ComponentStatus, StepSeverity
from assetwatch.models.impact import AffectedStep, ImpactResult
from assetwatch.models.inventory import Component, Dependency, Workflow

from .graph_builder import ForwardMap, build_forward_map, require_sequence
from .scorer import ImpactScorer

logger = structlog.get_logger()

UNKNOWN_COMPONENT_NAME = "Unknown"


class ImpactAnalyzer:
    """
    Computes impact reports and ranked analysis results.

    Attributes:
        scorer: Impact scoring engine
        logger: Structured logger

    Example:
        >>> analyzer = ImpactAnalyzer()
        >>> result = analyzer.analyze_impact("S1", components, dependencies, workflows)
        >>> result.direct_impacts, result.indirect_impacts
        (['S2'], ['S3'])
    """

    def __init__(self, scorer: Optional[ImpactScorer] = None):
        """
        Initialize the impact analyzer.

        Args:
            scorer: Optional custom impact scorer
        """
        self.scorer = scorer or ImpactScorer()
        self.logger = structlog.get_logger()

    def analyze_impact(
        self,
        component_id: str,
        components: Sequence[Component],
        dependencies: Sequence[Dependency],
        workflows: Sequence[Workflow],
    ) -> ImpactResult:
        """
        Analyze the downstream impact of one root component.

        Args:
            component_id: Root component id
            components: Status snapshot of every component
            dependencies: Dependency edges
            workflows: Business workflows

        Returns:
            ImpactResult for the root

        Raises:
            TypeError: If any collection argument is not a list or tuple
        """
        require_sequence("components", components)
        require_sequence("dependencies", dependencies)
        require_sequence("workflows", workflows)

        by_id = {c.id: c for c in components}
        root = by_id.get(component_id)
        if root is None:
            self.logger.warning("impact_root_unknown", component_id=component_id)
            return ImpactResult(
                component_id=component_id,
                component_name=UNKNOWN_COMPONENT_NAME,
            )

        forward = build_forward_map(dependencies)
        depths = self._compute_depths(component_id, forward)

        # Dict preserves discovery order; unknown ids and the root are dropped
        impacted_ids = [
            n for n in depths if n != component_id and n in by_id
        ]
        direct_ids = list(
            dict.fromkeys(
                n
                for n in forward.get(component_id, [])
                if n != component_id and n in by_id
            )
        )
        direct_set = set(direct_ids)
        indirect_ids = [n for n in impacted_ids if n not in direct_set]

        impacted_set = {component_id, *impacted_ids}
        affected_steps, affected_workflows = self._map_workflow_impact(
            impacted_set, by_id, workflows
        )

        breakdown, score = self.scorer.score_impact(
            direct_ids=direct_ids,
            indirect_ids=indirect_ids,
            impacted_ids=impacted_ids,
            depths={n: d for n, d in depths.items() if n == component_id or n in by_id},
            affected_workflow_count=len(affected_workflows),
            affected_steps=affected_steps,
            root_criticality=root.criticality,
        )
        risk_level = self.scorer.classify_risk(score)

        def names(ids: list[str]) -> list[str]:
            return [by_id[i].name for i in ids]

        result = ImpactResult(
            component_id=component_id,
            component_name=root.name,
            direct_impacts=direct_ids,
            indirect_impacts=indirect_ids,
            impacted_component_ids=impacted_ids,
            direct_impact_names=names(direct_ids),
            indirect_impact_names=names(indirect_ids),
            impacted_components=names(impacted_ids),
            affected_workflows=[w.name for w in affected_workflows],
            affected_workflow_ids=[w.id for w in affected_workflows],
            affected_steps=affected_steps,
            business_impact_score=score,
            risk_level=risk_level,
            breakdown=breakdown,
        )

        self.logger.debug(
            "impact_analysis_completed",
            component_id=component_id,
            impacted_count=len(impacted_ids),
            affected_workflows=len(affected_workflows),
            business_impact_score=score,
            risk_level=risk_level.value,
        )

        return result

    def compute_analysis_results(
        self,
        components: Sequence[Component],
        dependencies: Sequence[Dependency],
        workflows: Sequence[Workflow],
        scope: AnalysisScope = AnalysisScope.NON_ONLINE,
    ) -> list[ImpactResult]:
        """
        Analyze every component in scope, ranked by business impact score.

        Args:
            components: Status snapshot of every component
            dependencies: Dependency edges
            workflows: Business workflows
            scope: NON_ONLINE (default) analyzes every component whose status
                is not online; ALL_COMPONENTS analyzes everything

        Returns:
            Results sorted by descending score. The sort is stable: ties keep
            the order of the scope-filtered component list.
        """
        require_sequence("components", components)
        scope = AnalysisScope(scope)

        if scope == AnalysisScope.ALL_COMPONENTS:
            source = list(components)
        else:
            source = [c for c in components if c.status != ComponentStatus.ONLINE]

        results = [
            self.analyze_impact(c.id, components, dependencies, workflows)
            for c in source
        ]
        results.sort(key=lambda r: r.business_impact_score, reverse=True)

        self.logger.info(
            "impact_analysis_batch_completed",
            scope=scope.value,
            analyzed=len(results),
            top_score=results[0].business_impact_score if results else 0,
        )

        return results

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _compute_depths(self, root: str, forward: ForwardMap) -> dict[str, int]:
        """
        Shortest-path depth of every node reachable from ``root``.

        A BFS pass assigns depths in discovery order (root 0, direct
        neighbours 1, ...). A relaxation loop bounded by the node count then
        lowers any depth that an edge ``u -> v`` can improve, so the result
        is the shortest-path fixpoint regardless of traversal order.

        Returns:
            Dict of node id to depth, in discovery order, including the root
        """
        depths: dict[str, int] = {root: 0}
        queue: deque[str] = deque([root])
        while queue:
            current = queue.popleft()
            next_depth = depths[current] + 1
            for neighbour in forward.get(current, ()):
                if neighbour not in depths:
                    depths[neighbour] = next_depth
                    queue.append(neighbour)

        for _ in range(len(depths)):
            changed = False
            for node in list(depths):
                candidate = depths[node] + 1
                for neighbour in forward.get(node, ()):
                    if candidate < depths[neighbour]:
                        depths[neighbour] = candidate
                        changed = True
            if not changed:
                break

        return depths

    def _map_workflow_impact(
        self,
        impacted_set: set[str],
        by_id: dict[str, Component],
        workflows: Sequence[Workflow],
    ) -> tuple[list[AffectedStep], list[Workflow]]:
        """
        Find impacted workflow steps and the workflows they break.

        A step is impacted when one of its primary components is in
        ``impacted_set``. Its severity is WARNING when any alternative
        component is currently online, otherwise ERROR. Only workflows with
        at least one ERROR step are returned as affected.

        Returns:
            Tuple of (affected steps, affected workflows)
        """
        affected_steps: list[AffectedStep] = []
        affected_workflows: list[Workflow] = []

        for workflow in workflows:
            has_error = False
            for step in workflow.steps:
                reason_ids = [
                    pid for pid in step.all_primary_ids() if pid in impacted_set
                ]
                if not reason_ids:
                    continue

                any_alternative_online = any(
                    aid in by_id and by_id[aid].status == ComponentStatus.ONLINE
                    for aid in step.alternative_component_ids
                )
                severity = (
                    StepSeverity.WARNING
                    if any_alternative_online
                    else StepSeverity.ERROR
                )
                has_error = has_error or severity == StepSeverity.ERROR

                affected_steps.append(
                    AffectedStep(
                        workflow_id=workflow.id,
                        workflow_name=workflow.name,
                        step_id=step.id,
                        step_name=step.name,
                        reason_component_ids=reason_ids,
                        severity=severity,
                    )
                )

            if has_error:
                affected_workflows.append(workflow)

        return affected_steps, affected_workflows
