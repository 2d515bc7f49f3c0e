"""
Audit Service: records state changes and summarizes recent activity.

Every inventory write goes through here so the audit log stays the single
history the health trend and alert dating are reconstructed from. Entries
carry enough context to be readable on their own:

- COMPONENT: type, criticality and status in ``details``
- DEPENDENCY: edge type, criticality and endpoint names
- WORKFLOW: business process, criticality and step count
- Updates additionally carry full before/after snapshots in ``changes``

Version: audit_service_v1
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Optional

import structlog

from assetwatch.models.audit import ActivitySummary, AuditChanges, AuditLog
from assetwatch.models.enums import AuditAction, AuditEntityType
from assetwatch.models.inventory import Component, Dependency, Workflow
from assetwatch.storage.base import StorageBackend
from assetwatch.utils.timestamps import to_naive_utc

logger = structlog.get_logger()


DEFAULT_SUMMARY_DAYS = 7
TOP_ENTITY_COUNT = 10


def _changes(before: Optional[Any], after: Any) -> Optional[AuditChanges]:
    if before is None:
        return None
    return AuditChanges(
        before=before.model_dump(mode="json"),
        after=after.model_dump(mode="json"),
    )


class AuditService:
    """
    Writes and reads the audit log.

    Attributes:
        storage: Storage backend holding the audit log
        max_logs: Retention cap passed to every append (None keeps everything)

    Example:
        >>> audit = AuditService(storage, max_logs=1000)
        >>> audit.log_component_action(AuditAction.UPDATE, db, before=old_db)
        >>> audit.get_logs(limit=1)[0].recorded_status()
        'offline'
    """

    def __init__(self, storage: StorageBackend, max_logs: Optional[int] = None):
        self.storage = storage
        self.max_logs = max_logs
        self.logger = structlog.get_logger()

    def log(
        self,
        action: AuditAction,
        entity_type: AuditEntityType,
        details: dict[str, Any],
        entity_id: Optional[str] = None,
        entity_name: Optional[str] = None,
        changes: Optional[AuditChanges] = None,
    ) -> AuditLog:
        """
        Append one audit entry.

        Returns:
            The persisted AuditLog
        """
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            details=details,
            changes=changes,
        )
        self.storage.write_audit_log(entry, max_logs=self.max_logs)

        self.logger.info(
            "audit_logged",
            action=action.value,
            entity_type=entity_type.value,
            entity_id=entity_id,
        )
        return entry

    def log_component_action(
        self,
        action: AuditAction,
        component: Component,
        before: Optional[Component] = None,
    ) -> AuditLog:
        return self.log(
            action,
            AuditEntityType.COMPONENT,
            {
                "component_type": component.type.value,
                "criticality": component.criticality.value,
                "status": component.status.value,
            },
            entity_id=component.id,
            entity_name=component.name,
            changes=_changes(before, component),
        )

    def log_dependency_action(
        self,
        action: AuditAction,
        dependency: Dependency,
        source_name: Optional[str] = None,
        target_name: Optional[str] = None,
        before: Optional[Dependency] = None,
    ) -> AuditLog:
        source_name = source_name or dependency.source_id
        target_name = target_name or dependency.target_id
        return self.log(
            action,
            AuditEntityType.DEPENDENCY,
            {
                "dependency_type": dependency.type.value,
                "criticality": dependency.criticality.value,
                "source_component": source_name,
                "target_component": target_name,
            },
            entity_id=dependency.id,
            entity_name=f"{source_name} -> {target_name}",
            changes=_changes(before, dependency),
        )

    def log_workflow_action(
        self,
        action: AuditAction,
        workflow: Workflow,
        before: Optional[Workflow] = None,
    ) -> AuditLog:
        return self.log(
            action,
            AuditEntityType.WORKFLOW,
            {
                "business_process": workflow.business_process,
                "criticality": workflow.criticality.value,
                "steps_count": len(workflow.steps),
            },
            entity_id=workflow.id,
            entity_name=workflow.name,
            changes=_changes(before, workflow),
        )

    def log_analysis_run(
        self,
        analysis_type: str,
        component_count: int,
        results_count: int,
        target_component: Optional[str] = None,
    ) -> AuditLog:
        """Record an analysis run as a SYSTEM entry."""
        return self.log(
            AuditAction.ANALYSIS,
            AuditEntityType.SYSTEM,
            {
                "analysis_type": analysis_type,
                "component_count": component_count,
                "results_count": results_count,
                "target_component": target_component or "all",
            },
        )

    def get_logs(
        self,
        limit: Optional[int] = None,
        entity_type: Optional[AuditEntityType] = None,
        action: Optional[AuditAction] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
    ) -> list[AuditLog]:
        """Audit entries matching every given filter, newest first."""
        return self.storage.read_audit_logs(
            limit=limit,
            entity_type=entity_type.value if entity_type else None,
            action=action.value if action else None,
            from_date=to_naive_utc(from_date),
            to_date=to_naive_utc(to_date),
        )

    def get_activity_summary(
        self,
        days: int = DEFAULT_SUMMARY_DAYS,
        now: Optional[datetime] = None,
    ) -> ActivitySummary:
        """
        Summarize activity over the trailing ``days``.

        Args:
            days: Window length in days
            now: End of the window (default: now)

        Returns:
            ActivitySummary with totals, counts per action and per calendar
            day (``YYYY-MM-DD``), and the ten most active entity names
            (ties keep the order of first appearance, newest first)
        """
        now = to_naive_utc(now) if now else datetime.utcnow()
        logs = self.get_logs(from_date=now - timedelta(days=days), to_date=now)

        actions_by_type = Counter(entry.action.value for entry in logs)
        actions_per_day = Counter(entry.timestamp.date().isoformat() for entry in logs)
        entity_actions = Counter(entry.entity_name for entry in logs if entry.entity_name)

        summary = ActivitySummary(
            total_actions=len(logs),
            actions_by_type=dict(actions_by_type),
            actions_per_day=dict(actions_per_day),
            top_entities=[
                {"name": name, "actions": count}
                for name, count in entity_actions.most_common(TOP_ENTITY_COUNT)
            ],
        )

        self.logger.debug(
            "activity_summary_computed", days=days, total_actions=summary.total_actions
        )
        return summary
