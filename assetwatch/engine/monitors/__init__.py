"""
Monitor Engine.

Derived, memoryless views of the inventory's current and recent health.

Components:
    AlertGenerator: Root, derived, summary and maintenance alerts, severity-sorted
    HealthScorer: Effective health snapshot and hourly trend from the audit log
    status_history: Point-in-time component status reconstruction

Example:
    >>> from assetwatch.engine.monitors import AlertGenerator, HealthScorer
    >>> alerts = AlertGenerator().generate_alerts(components, dependencies, logs)
    >>> trend = HealthScorer().compute_trend(components, dependencies, logs, hours=24)
"""

from .alert_generator import AlertGenerator
from .health_scorer import HealthScorer
from .status_history import index_logs_by_component, status_at, status_since

__all__ = [
    "AlertGenerator",
    "HealthScorer",
    "index_logs_by_component",
    "status_at",
    "status_since",
]
