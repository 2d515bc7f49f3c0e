"""
Enumeration types for the AssetWatch inventory and impact engine.

This module defines all enum types used across the system for type safety
and consistent validation. All enums inherit from str to ensure JSON
serialization compatibility.
"""

from enum import Enum


class ComponentType(str, Enum):
    """
    Kinds of IT assets tracked in the inventory.

    The list is closed; new kinds are added here rather than accepted as
    free text at the repository boundary.
    """

    SERVER = "server"
    DATABASE = "database"
    API = "api"
    LOAD_BALANCER = "load-balancer"
    NETWORK = "network"
    APPLICATION = "application"
    SERVICE = "service"
    STORAGE = "storage"
    ENDPOINT = "endpoint"
    VIRTUAL_MACHINE = "virtual-machine"
    FIREWALL = "firewall"
    ROUTER = "router"
    SWITCH = "switch"
    CLOUD_INSTANCE = "cloud-instance"
    LICENSE = "license"
    BACKUP = "backup"
    DOMAIN = "domain"
    CERTIFICATE = "certificate"
    USER_ACCOUNT = "user-account"
    MODUL = "modul"


class ComponentStatus(str, Enum):
    """
    Externally asserted health status of a component.

    Only OFFLINE and WARNING seed impact cascades; MAINTENANCE is reported
    but never propagates.
    """

    ONLINE = "online"
    OFFLINE = "offline"
    WARNING = "warning"
    MAINTENANCE = "maintenance"


class Criticality(str, Enum):
    """Business criticality shared by components, dependencies and workflows."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DependencyType(str, Enum):
    """Relationship kinds for a directed dependency edge."""

    REQUIRES = "requires"
    USES = "uses"
    FEEDS = "feeds"
    MONITORS = "monitors"


class StepSeverity(str, Enum):
    """
    Severity of an impacted workflow step.

    WARNING means a healthy alternative component can take over; ERROR
    means the step has no online fallback.
    """

    WARNING = "warning"
    ERROR = "error"


class RiskLevel(str, Enum):
    """Risk classification derived from the business impact score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertSeverity(str, Enum):
    """
    Severity levels for dashboard alerts.

    Ordering for display is CRITICAL, WARNING, INFO, SUCCESS.
    """

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class AnalysisScope(str, Enum):
    """Which components a batch impact analysis covers."""

    NON_ONLINE = "non-online"
    ALL_COMPONENTS = "all-components"


class HealthBand(str, Enum):
    """Coloring band for a health trend sample."""

    SUCCESS = "success"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


class AuditAction(str, Enum):
    """Actions recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    EXPORT = "EXPORT"
    IMPORT = "IMPORT"
    ANALYSIS = "ANALYSIS"


class AuditEntityType(str, Enum):
    """Entity kinds an audit entry can refer to."""

    COMPONENT = "COMPONENT"
    DEPENDENCY = "DEPENDENCY"
    WORKFLOW = "WORKFLOW"
    SYSTEM = "SYSTEM"
