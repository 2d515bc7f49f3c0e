"""
Alert Generator: dashboard alerts derived from the current status snapshot.

Alerts are recomputed on every call; nothing is persisted or acknowledged.
For each unhealthy component the generator emits a root alert plus one
derived alert per downstream component it reaches, attributed to the
nearest upstream cause:

- offline: root + derived alerts, severity CRITICAL
- warning: root + derived alerts, severity WARNING ("performance impacted")
- critical dependency paths with a non-online endpoint: one summary alert
- maintenance: one INFO alert, no propagation

Alerts are ordered by severity rank first, then newest first.

Version: alert_generator_v1
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

import structlog

from assetwatch.engine.impact.graph_builder import build_forward_map, require_sequence
from assetwatch.engine.impact.reachability import bfs_impact_map
from assetwatch.models.alerts import Alert
from assetwatch.models.audit import AuditLog
from assetwatch.models.enums import AlertSeverity, ComponentStatus, Criticality
from assetwatch.models.inventory import Component, Dependency
from assetwatch.utils.timestamps import to_naive_utc

from .status_history import StatusTimeline, index_logs_by_component, status_since

logger = structlog.get_logger()


SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.INFO: 2,
    AlertSeverity.SUCCESS: 3,
}

CRITICAL_PATHS_ALERT_ID = "critical-paths"
CRITICAL_PATHS_ACTION_URL = "#dependencies"


def component_action_url(component_id: str) -> str:
    return f"#components/{component_id}"


class AlertGenerator:
    """
    Builds the sorted alert list for a status snapshot.

    Example:
        >>> generator = AlertGenerator()
        >>> alerts = generator.generate_alerts(components, dependencies)
        >>> [a.id for a in alerts]
        ['impacted-by-offline-db-api', 'offline-db']
    """

    def __init__(self):
        self.logger = structlog.get_logger()

    def generate_alerts(
        self,
        components: Sequence[Component],
        dependencies: Sequence[Dependency],
        audit_logs: Optional[Sequence[AuditLog]] = None,
        as_of: Optional[datetime] = None,
    ) -> list[Alert]:
        """
        Generate every alert for the snapshot.

        Args:
            components: Status snapshot of every component
            dependencies: Dependency edges
            audit_logs: Optional audit window, used to date root alerts
            as_of: Timestamp for derived and summary alerts (default: now)

        Returns:
            Alerts sorted by severity rank, then timestamp descending.
            Duplicate ids keep the first alert generated.

        Raises:
            TypeError: If components or dependencies is not a list or tuple
        """
        require_sequence("components", components)
        require_sequence("dependencies", dependencies)
        if audit_logs is not None:
            require_sequence("audit_logs", audit_logs)

        as_of = to_naive_utc(as_of) if as_of else datetime.utcnow()
        by_id = {c.id: c for c in components}
        forward = build_forward_map(dependencies)
        timelines = index_logs_by_component(audit_logs or [])

        alerts: list[Alert] = []

        for component in components:
            if component.status == ComponentStatus.OFFLINE:
                alerts.extend(
                    self._cascade_alerts(
                        component, "offline", AlertSeverity.CRITICAL,
                        by_id, forward, timelines, as_of,
                    )
                )
            elif component.status == ComponentStatus.WARNING:
                alerts.extend(
                    self._cascade_alerts(
                        component, "warning", AlertSeverity.WARNING,
                        by_id, forward, timelines, as_of,
                    )
                )

        summary = self._critical_paths_alert(dependencies, by_id, as_of)
        if summary is not None:
            alerts.append(summary)

        for component in components:
            if component.status == ComponentStatus.MAINTENANCE:
                alerts.append(self._maintenance_alert(component, timelines))

        alerts = self._dedupe(alerts)
        ordered = self.sort_alerts(alerts)

        self.logger.info(
            "alerts_generated",
            total=len(ordered),
            critical=sum(1 for a in ordered if a.severity == AlertSeverity.CRITICAL),
            warning=sum(1 for a in ordered if a.severity == AlertSeverity.WARNING),
        )

        return ordered

    @staticmethod
    def sort_alerts(alerts: Sequence[Alert]) -> list[Alert]:
        """
        Order alerts by severity rank, then timestamp descending.

        Two stable passes: newest-first, then by rank. Alerts with equal
        rank and timestamp keep their input order.
        """
        ordered = sorted(alerts, key=lambda a: a.timestamp, reverse=True)
        ordered.sort(key=lambda a: SEVERITY_RANK[a.severity])
        return ordered

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _cascade_alerts(
        self,
        root: Component,
        kind: str,
        severity: AlertSeverity,
        by_id: dict[str, Component],
        forward: dict[str, list[str]],
        timelines: dict[str, StatusTimeline],
        as_of: datetime,
    ) -> list[Alert]:
        """Root alert followed by one derived alert per known downstream node."""
        impact = bfs_impact_map(root.id, forward)
        impacted = [
            (by_id[node_id], cause)
            for node_id, cause in impact.items()
            if node_id in by_id
        ]

        since = status_since(root.id, root.status, timelines) or root.last_updated

        if kind == "offline":
            title = f"{root.name} Offline"
            message = (
                f'The {root.criticality.value} asset "{root.name}" is offline '
                f"and may impact dependent services."
            )
        else:
            title = f"{root.name} Performance Issue"
            message = (
                f'The {root.criticality.value} asset "{root.name}" is showing '
                f"degraded performance."
            )

        alerts = [
            Alert(
                id=f"{kind}-{root.id}",
                title=title,
                message=message,
                severity=severity,
                timestamp=since,
                component=root.name,
                criticality=root.criticality,
                action_url=component_action_url(root.id),
                root_component_id=root.id,
                impacted_components=[c.name for c, _ in impacted],
            )
        ]

        for target, cause in impacted:
            cause_component = by_id.get(cause.cause_id)
            cause_name = cause_component.name if cause_component else root.name
            if kind == "offline":
                derived_message = f"{target.name} is impacted by {cause_name} outage"
            else:
                derived_message = f"{target.name} performance impacted by {cause_name}"

            alerts.append(
                Alert(
                    id=f"impacted-by-{kind}-{root.id}-{target.id}",
                    title=f"{target.name} Impacted",
                    message=derived_message,
                    severity=severity,
                    timestamp=as_of,
                    component=target.name,
                    criticality=target.criticality,
                    action_url=component_action_url(target.id),
                    root_component_id=root.id,
                    cause_component_id=cause.cause_id,
                )
            )

        return alerts

    def _critical_paths_alert(
        self,
        dependencies: Sequence[Dependency],
        by_id: dict[str, Component],
        as_of: datetime,
    ) -> Optional[Alert]:
        """Summary alert counting critical edges with a known non-online endpoint."""

        def unhealthy(component_id: str) -> bool:
            component = by_id.get(component_id)
            return component is not None and component.status != ComponentStatus.ONLINE

        affected = sum(
            1
            for dep in dependencies
            if dep.criticality == Criticality.CRITICAL
            and (unhealthy(dep.source_id) or unhealthy(dep.target_id))
        )
        if affected == 0:
            return None

        return Alert(
            id=CRITICAL_PATHS_ALERT_ID,
            title="Critical Dependency Issues",
            message=f"{affected} critical dependency paths are affected by asset issues.",
            severity=AlertSeverity.WARNING,
            timestamp=as_of,
            component="Multiple",
            criticality=Criticality.CRITICAL,
            action_url=CRITICAL_PATHS_ACTION_URL,
        )

    def _maintenance_alert(
        self, component: Component, timelines: dict[str, StatusTimeline]
    ) -> Alert:
        since = (
            status_since(component.id, component.status, timelines)
            or component.last_updated
        )
        return Alert(
            id=f"maintenance-{component.id}",
            title=f"{component.name} Under Maintenance",
            message=f'The asset "{component.name}" is currently under maintenance.',
            severity=AlertSeverity.INFO,
            timestamp=since,
            component=component.name,
            criticality=component.criticality,
            action_url=component_action_url(component.id),
            root_component_id=component.id,
        )

    def _dedupe(self, alerts: list[Alert]) -> list[Alert]:
        seen: set[str] = set()
        unique: list[Alert] = []
        for alert in alerts:
            if alert.id in seen:
                continue
            seen.add(alert.id)
            unique.append(alert)
        if len(unique) != len(alerts):
            self.logger.debug(
                "duplicate_alerts_dropped", dropped=len(alerts) - len(unique)
            )
        return unique
