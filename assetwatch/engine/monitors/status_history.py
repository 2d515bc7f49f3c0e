"""
Status History: point-in-time component status from the audit log.

The audit log is the only record of past statuses. An entry "records" a
status when its ``changes.after.status`` (or, failing that,
``details.status``) is set. Entries that record no status, or a value
outside ComponentStatus, are ignored.

Version: status_history_v1
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Optional

import structlog

from assetwatch.models.audit import AuditLog
from assetwatch.models.enums import AuditEntityType, ComponentStatus
from assetwatch.utils.timestamps import to_naive_utc

logger = structlog.get_logger()

# (timestamp, status) pairs, oldest first
StatusTimeline = list[tuple[datetime, ComponentStatus]]


def index_logs_by_component(logs: Iterable[AuditLog]) -> dict[str, StatusTimeline]:
    """
    Group status-recording COMPONENT entries by component id.

    Args:
        logs: Audit entries in any order

    Returns:
        Dict of component id to its status timeline, oldest first. Entries
        with equal timestamps keep their input order.
    """
    timelines: dict[str, StatusTimeline] = {}
    skipped = 0

    for entry in logs:
        if entry.entity_type != AuditEntityType.COMPONENT or not entry.entity_id:
            continue
        recorded = entry.recorded_status()
        if recorded is None:
            continue
        try:
            status = ComponentStatus(recorded)
        except ValueError:
            skipped += 1
            continue
        timelines.setdefault(entry.entity_id, []).append((entry.timestamp, status))

    for timeline in timelines.values():
        timeline.sort(key=lambda item: item[0])

    if skipped:
        logger.debug("audit_status_values_skipped", count=skipped)

    return timelines


def status_at(
    component_id: str,
    logs_by_component: Mapping[str, StatusTimeline],
    instant: datetime,
) -> ComponentStatus:
    """
    Status of a component at ``instant``.

    The most recent recorded status at or before ``instant`` wins; a
    component with no such entry is assumed online.

    Example:
        >>> timelines = {"db": [(t0, ComponentStatus.OFFLINE)]}
        >>> status_at("db", timelines, t0 - timedelta(hours=1))
        <ComponentStatus.ONLINE: 'online'>
    """
    instant = to_naive_utc(instant)
    current = ComponentStatus.ONLINE
    for timestamp, status in logs_by_component.get(component_id, ()):
        if timestamp > instant:
            break
        current = status
    return current


def status_since(
    component_id: str,
    current_status: ComponentStatus,
    logs_by_component: Mapping[str, StatusTimeline],
) -> Optional[datetime]:
    """
    When a component entered its current status.

    Walks the timeline backwards over the trailing run of entries that
    record ``current_status`` and returns the oldest of them. Returns None
    when the newest recorded status differs from ``current_status`` or
    nothing was recorded.
    """
    since: Optional[datetime] = None
    for timestamp, status in reversed(logs_by_component.get(component_id, ())):
        if status != current_status:
            break
        since = timestamp
    return since


def snapshot_statuses_at(
    component_ids: Sequence[str],
    logs_by_component: Mapping[str, StatusTimeline],
    instant: datetime,
) -> dict[str, ComponentStatus]:
    """Reconstruct the status of every listed component at ``instant``."""
    return {
        cid: status_at(cid, logs_by_component, instant) for cid in component_ids
    }
