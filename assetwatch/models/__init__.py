"""
Pydantic v2 data models for the AssetWatch engine.

Model Organization:
    - enums: Enumeration types for consistent classification
    - inventory: Components, dependencies and workflows
    - impact: Impact analysis results and causal attribution
    - alerts: Derived dashboard alerts
    - audit: Audit log entries and activity summaries
    - health: Effective health snapshot and trend samples
    - validation: Dependency validation results

Usage:
    >>> from assetwatch.models import Component, Dependency
    >>> db = Component(id="db", name="Primary DB", type=ComponentType.DATABASE)
    >>> edge = Dependency(source_id="db", target_id="api")
"""

# Enumerations
from .enums import (
    AlertSeverity,
    AnalysisScope,
    AuditAction,
    AuditEntityType,
    ComponentStatus,
    ComponentType,
    Criticality,
    DependencyType,
    HealthBand,
    RiskLevel,
    StepSeverity,
)

# Inventory models
from .inventory import Component, Dependency, Workflow, WorkflowStep

# Impact models
from .impact import AffectedStep, ImpactCause, ImpactResult, ScoreBreakdown

# Alert models
from .alerts import Alert

# Audit models
from .audit import ActivitySummary, AuditChanges, AuditLog

# Health models
from .health import HealthSnapshot, HealthTrendPoint

# Validation models
from .validation import CycleReport, TypeCheckResult, ValidationResult

__all__ = [
    # Enumerations
    "AlertSeverity",
    "AnalysisScope",
    "AuditAction",
    "AuditEntityType",
    "ComponentStatus",
    "ComponentType",
    "Criticality",
    "DependencyType",
    "HealthBand",
    "RiskLevel",
    "StepSeverity",
    # Inventory models
    "Component",
    "Dependency",
    "Workflow",
    "WorkflowStep",
    # Impact models
    "AffectedStep",
    "ImpactCause",
    "ImpactResult",
    "ScoreBreakdown",
    # Alert models
    "Alert",
    # Audit models
    "ActivitySummary",
    "AuditChanges",
    "AuditLog",
    # Health models
    "HealthSnapshot",
    "HealthTrendPoint",
    # Validation models
    "CycleReport",
    "TypeCheckResult",
    "ValidationResult",
]
