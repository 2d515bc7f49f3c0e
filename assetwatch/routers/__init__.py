"""API routers for all endpoints."""

from assetwatch.routers import (
    alerts,
    analysis,
    audit,
    components,
    dependencies,
    health,
    system,
    validation,
    workflows,
)

__all__ = [
    "components",
    "dependencies",
    "workflows",
    "analysis",
    "alerts",
    "health",
    "audit",
    "validation",
    "system",
]
