"""
Inventory Service: audited CRUD over components, dependencies and workflows.

This is the write side of the system. It owns the rules the analysis
engine deliberately does not enforce:

- Dependency endpoints must exist
- No self-loops, no duplicate (source, target) edges, no cycles
- Deleting a component deletes every edge touching it

Every successful write is recorded through the AuditService; component
status changes in particular are what the health trend is rebuilt from.

Version: inventory_service_v1
"""

from datetime import datetime
from typing import Any, Optional

import structlog

from assetwatch.engine.validation import DependencyValidator
from assetwatch.models.enums import AuditAction
from assetwatch.models.inventory import Component, Dependency, Workflow
from assetwatch.storage.base import StorageBackend

from .audit import AuditService

logger = structlog.get_logger()


class EntityNotFoundError(Exception):
    """Raised when a referenced component, dependency or workflow does not exist."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}' not found")


class DependencyValidationError(Exception):
    """Raised when a dependency write fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class InventoryService:
    """
    Audited repository over the storage backend.

    Attributes:
        storage: Storage backend
        audit: Audit service recording every write
        validator: Dependency validator run before edge writes

    Example:
        >>> service = InventoryService(storage)
        >>> db = service.create_component(Component(name="DB", type="database"))
        >>> service.update_component(db.id, {"status": "offline"}).status
        <ComponentStatus.OFFLINE: 'offline'>
    """

    def __init__(
        self,
        storage: StorageBackend,
        audit: Optional[AuditService] = None,
        validator: Optional[DependencyValidator] = None,
    ):
        self.storage = storage
        self.audit = audit or AuditService(storage)
        self.validator = validator or DependencyValidator()
        self.logger = structlog.get_logger()

    def snapshot(self) -> tuple[list[Component], list[Dependency], list[Workflow]]:
        """Current components, dependencies and workflows for analysis."""
        return (
            self.storage.read_components(),
            self.storage.read_dependencies(),
            self.storage.read_workflows(),
        )

    # =========================================================================
    # Components
    # =========================================================================

    def list_components(self) -> list[Component]:
        return self.storage.read_components()

    def get_component(self, component_id: str) -> Component:
        """
        Raises:
            EntityNotFoundError: If no component has this id
        """
        component = self.storage.read_component(component_id)
        if component is None:
            raise EntityNotFoundError("Component", component_id)
        return component

    def create_component(self, component: Component) -> Component:
        self.storage.write_component(component)
        self.audit.log_component_action(AuditAction.CREATE, component)
        self.logger.info("component_created", component_id=component.id)
        return component

    def update_component(self, component_id: str, updates: dict[str, Any]) -> Component:
        """
        Apply a partial update and stamp ``last_updated``.

        Raises:
            EntityNotFoundError: If no component has this id
            pydantic.ValidationError: If the merged record is invalid
        """
        before = self.get_component(component_id)
        after = Component.model_validate(
            {
                **before.model_dump(),
                **updates,
                "id": component_id,
                "last_updated": datetime.utcnow(),
            }
        )
        self.storage.write_component(after)
        self.audit.log_component_action(AuditAction.UPDATE, after, before=before)

        if before.status != after.status:
            self.logger.info(
                "component_status_changed",
                component_id=component_id,
                before=before.status.value,
                after=after.status.value,
            )
        return after

    def delete_component(self, component_id: str) -> list[str]:
        """
        Delete a component and every dependency edge touching it.

        Returns:
            Ids of the deleted dependency edges

        Raises:
            EntityNotFoundError: If no component has this id
        """
        component = self.get_component(component_id)

        removed: list[str] = []
        for dependency in self.storage.read_dependencies(component_id=component_id):
            self._delete_dependency_record(dependency)
            removed.append(dependency.id)

        self.storage.delete_component(component_id)
        self.audit.log_component_action(AuditAction.DELETE, component)

        self.logger.info(
            "component_deleted",
            component_id=component_id,
            cascaded_dependencies=len(removed),
        )
        return removed

    # =========================================================================
    # Dependencies
    # =========================================================================

    def list_dependencies(self, component_id: Optional[str] = None) -> list[Dependency]:
        return self.storage.read_dependencies(component_id=component_id)

    def get_dependency(self, dependency_id: str) -> Dependency:
        dependency = self.storage.read_dependency(dependency_id)
        if dependency is None:
            raise EntityNotFoundError("Dependency", dependency_id)
        return dependency

    def create_dependency(self, dependency: Dependency) -> Dependency:
        """
        Validate and persist a new edge.

        Raises:
            EntityNotFoundError: If either endpoint does not exist
            DependencyValidationError: If the edge is a self-loop, a duplicate
                or would close a cycle
        """
        source, target = self._check_and_resolve(dependency)
        if dependency.last_updated is None:
            dependency = dependency.model_copy(update={"last_updated": datetime.utcnow()})

        self.storage.write_dependency(dependency)
        self.audit.log_dependency_action(
            AuditAction.CREATE, dependency, source.name, target.name
        )
        return dependency

    def update_dependency(self, dependency_id: str, updates: dict[str, Any]) -> Dependency:
        """
        Apply a partial update to an edge, re-running validation.

        Raises:
            EntityNotFoundError: If the edge or either endpoint does not exist
            DependencyValidationError: If the updated edge fails validation
        """
        before = self.get_dependency(dependency_id)
        after = Dependency.model_validate(
            {
                **before.model_dump(),
                **updates,
                "id": dependency_id,
                "last_updated": datetime.utcnow(),
            }
        )
        source, target = self._check_and_resolve(after)

        self.storage.write_dependency(after)
        self.audit.log_dependency_action(
            AuditAction.UPDATE, after, source.name, target.name, before=before
        )
        return after

    def delete_dependency(self, dependency_id: str) -> None:
        dependency = self.get_dependency(dependency_id)
        self._delete_dependency_record(dependency)

    def dependency_type_warnings(self, dependency: Dependency) -> list[str]:
        """Advisory warnings for an edge whose endpoint types look implausible."""
        source = self.storage.read_component(dependency.source_id)
        target = self.storage.read_component(dependency.target_id)
        if source is None or target is None:
            return []
        return self.validator.validate_dependency_type(
            source.type, target.type, dependency.type
        ).warnings

    # =========================================================================
    # Workflows
    # =========================================================================

    def list_workflows(self) -> list[Workflow]:
        return self.storage.read_workflows()

    def get_workflow(self, workflow_id: str) -> Workflow:
        workflow = self.storage.read_workflow(workflow_id)
        if workflow is None:
            raise EntityNotFoundError("Workflow", workflow_id)
        return workflow

    def create_workflow(self, workflow: Workflow) -> Workflow:
        self.storage.write_workflow(workflow)
        self.audit.log_workflow_action(AuditAction.CREATE, workflow)
        return workflow

    def update_workflow(self, workflow_id: str, updates: dict[str, Any]) -> Workflow:
        before = self.get_workflow(workflow_id)
        after = Workflow.model_validate(
            {
                **before.model_dump(),
                **updates,
                "id": workflow_id,
                "last_updated": datetime.utcnow(),
            }
        )
        self.storage.write_workflow(after)
        self.audit.log_workflow_action(AuditAction.UPDATE, after, before=before)
        return after

    def delete_workflow(self, workflow_id: str) -> None:
        workflow = self.get_workflow(workflow_id)
        self.storage.delete_workflow(workflow_id)
        self.audit.log_workflow_action(AuditAction.DELETE, workflow)

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _check_and_resolve(self, dependency: Dependency) -> tuple[Component, Component]:
        """Resolve both endpoints and run the validator against existing edges."""
        source = self.get_component(dependency.source_id)
        target = self.get_component(dependency.target_id)

        result = self.validator.validate_dependency(
            dependency, self.storage.read_dependencies()
        )
        if not result.is_valid:
            raise DependencyValidationError(result.errors)
        return source, target

    def _delete_dependency_record(self, dependency: Dependency) -> None:
        source = self.storage.read_component(dependency.source_id)
        target = self.storage.read_component(dependency.target_id)
        self.storage.delete_dependency(dependency.id)
        self.audit.log_dependency_action(
            AuditAction.DELETE,
            dependency,
            source.name if source else None,
            target.name if target else None,
        )
