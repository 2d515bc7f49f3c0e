"""
Abstract storage interface for the AssetWatch inventory.

This module defines the storage abstraction layer between the inventory
service and the database. All storage operations are defined as abstract
methods enforcing a consistent contract across implementations (DuckDB in
production, an in-memory mock in tests).

The storage layer holds two kinds of data:
- Entities: components, dependencies and workflows (plain CRUD)
- Audit log: append-only history of state changes, capped in size

Storage never validates graph semantics (self-loops, cycles, duplicate
edges); that is the inventory service's job.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from assetwatch.models.audit import AuditLog
from assetwatch.models.inventory import Component, Dependency, Workflow


class StorageBackend(ABC):
    """
    Abstract base class for all storage implementations.

    Implementations must provide:
    - Upsert semantics on write (write with an existing id replaces it)
    - Stable read order (creation order) for entity listings
    - Newest-first ordering for audit reads
    - Thread safety for concurrent access
    - Error wrapping in StorageError with structured logging
    """

    # =========================================================================
    # Components
    # =========================================================================

    @abstractmethod
    def write_component(self, component: Component) -> str:
        """
        Insert or replace a component.

        Args:
            component: Component to persist

        Returns:
            The component id

        Raises:
            StorageError: If write operation fails
        """
        pass

    @abstractmethod
    def read_components(self) -> list[Component]:
        """Read every component in creation order."""
        pass

    @abstractmethod
    def read_component(self, component_id: str) -> Optional[Component]:
        """
        Read one component by id.

        Returns:
            Component if found, None otherwise
        """
        pass

    @abstractmethod
    def delete_component(self, component_id: str) -> bool:
        """
        Delete one component. Dependency edges touching it are left in place.

        Returns:
            True if a component was deleted
        """
        pass

    # =========================================================================
    # Dependencies
    # =========================================================================

    @abstractmethod
    def write_dependency(self, dependency: Dependency) -> str:
        """Insert or replace a dependency edge; returns its id."""
        pass

    @abstractmethod
    def read_dependencies(
        self, component_id: Optional[str] = None
    ) -> list[Dependency]:
        """
        Read dependency edges in creation order.

        Args:
            component_id: If given, only edges with this component as source
                or target

        Returns:
            List of dependencies
        """
        pass

    @abstractmethod
    def read_dependency(self, dependency_id: str) -> Optional[Dependency]:
        """Read one dependency by id, or None."""
        pass

    @abstractmethod
    def delete_dependency(self, dependency_id: str) -> bool:
        """Delete one dependency; True if it existed."""
        pass

    # =========================================================================
    # Workflows
    # =========================================================================

    @abstractmethod
    def write_workflow(self, workflow: Workflow) -> str:
        """Insert or replace a workflow (steps included); returns its id."""
        pass

    @abstractmethod
    def read_workflows(self) -> list[Workflow]:
        """Read every workflow in creation order."""
        pass

    @abstractmethod
    def read_workflow(self, workflow_id: str) -> Optional[Workflow]:
        """Read one workflow by id, or None."""
        pass

    @abstractmethod
    def delete_workflow(self, workflow_id: str) -> bool:
        """Delete one workflow; True if it existed."""
        pass

    # =========================================================================
    # Audit Log
    # =========================================================================

    @abstractmethod
    def write_audit_log(self, entry: AuditLog, max_logs: Optional[int] = None) -> str:
        """
        Append an audit entry.

        Args:
            entry: Audit entry to append
            max_logs: If given, drop the oldest entries beyond this count
                after the append

        Returns:
            The entry id

        Raises:
            StorageError: If write operation fails
        """
        pass

    @abstractmethod
    def read_audit_logs(
        self,
        limit: Optional[int] = None,
        entity_type: Optional[str] = None,
        action: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        entity_id: Optional[str] = None,
    ) -> list[AuditLog]:
        """
        Read audit entries, newest first.

        Args:
            limit: Maximum number of entries returned
            entity_type: Filter by entity type (e.g. "COMPONENT")
            action: Filter by action (e.g. "UPDATE")
            from_date: Inclusive lower bound on timestamp
            to_date: Inclusive upper bound on timestamp
            entity_id: Filter by entity id

        Returns:
            List of AuditLog, newest first

        Raises:
            StorageError: If read operation fails
        """
        pass
