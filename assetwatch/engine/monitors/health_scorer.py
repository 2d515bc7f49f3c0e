"""
Health Scorer: effective inventory health, now and over a trailing window.

"Effective" health treats every component reachable from an offline
component as down, even when its own status is online:

    effective online  = status online AND not impacted
    effective offline = status offline OR impacted
    network health    = effective online / total x 100

The trend reconstructs the status snapshot at each hourly instant of the
window from the audit log, then applies the same cascade.

Health band thresholds (exclusive lower bounds):
- SUCCESS: > 95
- WARNING: > 85
- DESTRUCTIVE: otherwise

Version: health_score_v2
"""

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Optional

import structlog

from assetwatch.engine.impact.graph_builder import build_forward_map, require_sequence
from assetwatch.engine.impact.reachability import (
    compute_impacted_from_offlines,
    traverse_downstream,
)
from assetwatch.engine.impact.scorer import round_half_up
from assetwatch.models.audit import AuditLog
from assetwatch.models.enums import ComponentStatus, Criticality, HealthBand
from assetwatch.models.health import HealthSnapshot, HealthTrendPoint
from assetwatch.models.inventory import Component, Dependency, Workflow
from assetwatch.utils.timestamps import to_naive_utc

from .status_history import index_logs_by_component, snapshot_statuses_at

logger = structlog.get_logger()


DEFAULT_TREND_HOURS = 24

BAND_THRESHOLDS = [
    (95.0, HealthBand.SUCCESS),
    (85.0, HealthBand.WARNING),
]


def health_percent(effective_online: int, total: int) -> float:
    """Effective online share as a percentage with one decimal rounded half up, 0 when empty."""
    if total <= 0:
        return 0.0
    return round_half_up(effective_online / total * 100 * 10) / 10


def classify_band(value: float) -> HealthBand:
    for threshold, band in BAND_THRESHOLDS:
        if value > threshold:
            return band
    return HealthBand.DESTRUCTIVE


class HealthScorer:
    """
    Computes the effective health snapshot and the hourly health trend.

    Stateless: every call works on the snapshot it is given.

    Example:
        >>> scorer = HealthScorer()
        >>> snapshot = scorer.compute_snapshot(components, dependencies)
        >>> snapshot.network_health
        66.7
        >>> trend = scorer.compute_trend(components, dependencies, logs, hours=24)
        >>> len(trend)
        25
    """

    def __init__(self):
        self.logger = structlog.get_logger()

    def compute_snapshot(
        self,
        components: Sequence[Component],
        dependencies: Sequence[Dependency],
        workflows: Optional[Sequence[Workflow]] = None,
    ) -> HealthSnapshot:
        """
        Effective health of the current status snapshot.

        Args:
            components: Status snapshot of every component
            dependencies: Dependency edges
            workflows: Optional workflows, counted with their distinct
                business processes

        Returns:
            HealthSnapshot

        Raises:
            TypeError: If a collection argument is not a list or tuple
        """
        require_sequence("components", components)
        require_sequence("dependencies", dependencies)
        if workflows is not None:
            require_sequence("workflows", workflows)
        workflows = workflows or []

        impacted = compute_impacted_from_offlines(components, dependencies)

        counts = {status: 0 for status in ComponentStatus}
        effective_online = 0
        effective_offline = 0
        for component in components:
            counts[component.status] += 1
            is_impacted = component.id in impacted
            if component.status == ComponentStatus.ONLINE and not is_impacted:
                effective_online += 1
            if component.status == ComponentStatus.OFFLINE or is_impacted:
                effective_offline += 1

        snapshot = HealthSnapshot(
            total_components=len(components),
            online_count=counts[ComponentStatus.ONLINE],
            warning_count=counts[ComponentStatus.WARNING],
            offline_count=counts[ComponentStatus.OFFLINE],
            maintenance_count=counts[ComponentStatus.MAINTENANCE],
            effective_online_count=effective_online,
            effective_offline_count=effective_offline,
            impacted_component_ids=[c.id for c in components if c.id in impacted],
            network_health=health_percent(effective_online, len(components)),
            total_dependencies=len(dependencies),
            critical_paths=sum(
                1 for d in dependencies if d.criticality == Criticality.CRITICAL
            ),
            total_workflows=len(workflows),
            business_processes=len(
                {w.business_process for w in workflows if w.business_process}
            ),
        )

        self.logger.info(
            "health_snapshot_computed",
            total_components=snapshot.total_components,
            network_health=snapshot.network_health,
            impacted=len(snapshot.impacted_component_ids),
        )

        return snapshot

    def compute_trend(
        self,
        components: Sequence[Component],
        dependencies: Sequence[Dependency],
        audit_logs: Sequence[AuditLog],
        hours: int = DEFAULT_TREND_HOURS,
        now: Optional[datetime] = None,
    ) -> list[HealthTrendPoint]:
        """
        Hourly effective health over the trailing ``hours``.

        Samples the instants ``now - hours``, ..., ``now - 1h``, ``now``
        (``hours + 1`` points, oldest first). At each instant the status of
        every component is the most recent audit-recorded status at or
        before it, defaulting to online. Entries older than the window still
        count, so a component that went down before the window opened is
        down for the whole window.

        Args:
            components: Current components (the population being sampled)
            dependencies: Dependency edges
            audit_logs: Audit entries, any order
            hours: Window length in hours
            now: End of the window (default: now)

        Returns:
            List of HealthTrendPoint, oldest first

        Raises:
            ValueError: If hours is negative
        """
        require_sequence("components", components)
        require_sequence("dependencies", dependencies)
        require_sequence("audit_logs", audit_logs)
        if hours < 0:
            raise ValueError(f"hours must be non-negative, got {hours}")

        now = to_naive_utc(now) if now else datetime.utcnow()
        forward = build_forward_map(dependencies)
        timelines = index_logs_by_component(audit_logs)
        component_ids = [c.id for c in components]

        points: list[HealthTrendPoint] = []
        for offset in range(hours, -1, -1):
            instant = now - timedelta(hours=offset)
            statuses = snapshot_statuses_at(component_ids, timelines, instant)

            offline = {
                cid for cid, status in statuses.items()
                if status == ComponentStatus.OFFLINE
            }
            impacted = (
                traverse_downstream(offline, forward, offline) if offline else set()
            )
            effective_online = sum(
                1
                for cid, status in statuses.items()
                if status == ComponentStatus.ONLINE and cid not in impacted
            )

            value = health_percent(effective_online, len(component_ids))
            hour_start = instant.replace(minute=0, second=0, microsecond=0)
            points.append(
                HealthTrendPoint(
                    timestamp=hour_start,
                    value=value,
                    label=hour_start.strftime("%H:%M"),
                    status=classify_band(value),
                )
            )

        self.logger.debug(
            "health_trend_computed",
            hours=hours,
            points=len(points),
            latest=points[-1].value if points else None,
        )

        return points
