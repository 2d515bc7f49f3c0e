"""
Business logic layer.
Services orchestrate data access, validation, auditing and domain logic.
"""

from assetwatch.config import get_settings
from assetwatch.storage import get_storage

from .audit import AuditService
from .inventory import DependencyValidationError, EntityNotFoundError, InventoryService


def get_audit_service() -> AuditService:
    """FastAPI dependency: audit service over the configured storage."""
    return AuditService(get_storage(), max_logs=get_settings().audit_max_logs)


def get_inventory_service() -> InventoryService:
    """FastAPI dependency: inventory service over the configured storage."""
    return InventoryService(get_storage(), audit=get_audit_service())


__all__ = [
    "AuditService",
    "InventoryService",
    "EntityNotFoundError",
    "DependencyValidationError",
    "get_audit_service",
    "get_inventory_service",
]
