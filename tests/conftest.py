"""
Pytest configuration and shared fixtures for the AssetWatch test suite.

Provides model factories, an in-memory storage mock, environment isolation
and reusable fixtures across all test types (unit, integration, golden,
property-based).
"""

import os
import tempfile
import uuid as _uuid
from datetime import datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient

# Set testing environment BEFORE importing app
# Use temp path (must not exist - DuckDB creates the file). :memory: causes
# per-connection DB which breaks multi-threaded tests.
_test_db_path = os.path.join(
    tempfile.gettempdir(), f"assetwatch_test_{_uuid.uuid4().hex[:8]}.duckdb"
)
os.environ["ASSETWATCH_TESTING"] = "true"
os.environ["ASSETWATCH_DB_PATH"] = _test_db_path


# ---------------------------------------------------------------------------
# Pydantic model factories: reusable across all test suites
# ---------------------------------------------------------------------------

from assetwatch.models.audit import AuditChanges, AuditLog
from assetwatch.models.enums import (
    AuditAction,
    AuditEntityType,
    ComponentStatus,
    ComponentType,
    Criticality,
    DependencyType,
)
from assetwatch.models.inventory import Component, Dependency, Workflow, WorkflowStep

BASE_TIME = datetime(2026, 2, 10, 12, 0, 0)


def make_component(
    component_id: str,
    name: Optional[str] = None,
    component_type: ComponentType = ComponentType.SERVER,
    status: ComponentStatus = ComponentStatus.ONLINE,
    criticality: Criticality = Criticality.MEDIUM,
    last_updated: datetime = BASE_TIME,
) -> Component:
    """Build a Component; the name defaults to the id."""
    return Component(
        id=component_id,
        name=name or component_id,
        type=component_type,
        status=status,
        criticality=criticality,
        last_updated=last_updated,
    )


def make_dependency(
    source_id: str,
    target_id: str,
    dependency_id: Optional[str] = None,
    dependency_type: DependencyType = DependencyType.REQUIRES,
    criticality: Criticality = Criticality.MEDIUM,
) -> Dependency:
    return Dependency(
        id=dependency_id or f"dep-{source_id}-{target_id}",
        source_id=source_id,
        target_id=target_id,
        type=dependency_type,
        criticality=criticality,
    )


def make_edges(*pairs: str) -> list[Dependency]:
    """Build dependencies from ``"A->B"`` strings, in order."""
    edges = []
    for i, pair in enumerate(pairs):
        source, target = pair.split("->")
        edges.append(make_dependency(source, target, dependency_id=f"dep-{i}"))
    return edges


def make_step(
    step_id: str,
    primary: Optional[list[str]] = None,
    alternatives: Optional[list[str]] = None,
    order: int = 0,
    legacy_primary: Optional[str] = None,
) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=f"Step {step_id}",
        primary_component_ids=primary or [],
        alternative_component_ids=alternatives or [],
        primary_component_id=legacy_primary,
        order=order,
    )


def make_workflow(
    workflow_id: str,
    steps: list[WorkflowStep],
    name: Optional[str] = None,
    criticality: Criticality = Criticality.HIGH,
    business_process: str = "Order to Cash",
) -> Workflow:
    return Workflow(
        id=workflow_id,
        name=name or workflow_id,
        criticality=criticality,
        steps=steps,
        business_process=business_process,
    )


def make_status_log(
    component_id: str,
    status: ComponentStatus,
    timestamp: datetime,
    before: Optional[ComponentStatus] = None,
) -> AuditLog:
    """Audit UPDATE entry recording a component status change."""
    return AuditLog(
        timestamp=timestamp,
        action=AuditAction.UPDATE,
        entity_type=AuditEntityType.COMPONENT,
        entity_id=component_id,
        entity_name=component_id,
        details={"status": status.value},
        changes=AuditChanges(
            before={"status": before.value} if before else None,
            after={"status": status.value},
        ),
    )


# ---------------------------------------------------------------------------
# Mock storage: reusable mock for pure unit tests
# ---------------------------------------------------------------------------

class MockStorage:
    """
    In-memory mock of StorageBackend for unit tests.

    Dicts keep insertion order, which stands in for creation order.
    """

    def __init__(self):
        self._components: dict[str, Component] = {}
        self._dependencies: dict[str, Dependency] = {}
        self._workflows: dict[str, Workflow] = {}
        self._audit_logs: list[AuditLog] = []

    # --- Components ---
    def write_component(self, component):
        self._components[component.id] = component
        return component.id

    def read_components(self):
        return list(self._components.values())

    def read_component(self, component_id):
        return self._components.get(component_id)

    def delete_component(self, component_id):
        return self._components.pop(component_id, None) is not None

    # --- Dependencies ---
    def write_dependency(self, dependency):
        self._dependencies[dependency.id] = dependency
        return dependency.id

    def read_dependencies(self, component_id=None):
        results = list(self._dependencies.values())
        if component_id:
            results = [
                d for d in results
                if d.source_id == component_id or d.target_id == component_id
            ]
        return results

    def read_dependency(self, dependency_id):
        return self._dependencies.get(dependency_id)

    def delete_dependency(self, dependency_id):
        return self._dependencies.pop(dependency_id, None) is not None

    # --- Workflows ---
    def write_workflow(self, workflow):
        self._workflows[workflow.id] = workflow
        return workflow.id

    def read_workflows(self):
        return list(self._workflows.values())

    def read_workflow(self, workflow_id):
        return self._workflows.get(workflow_id)

    def delete_workflow(self, workflow_id):
        return self._workflows.pop(workflow_id, None) is not None

    # --- Audit log ---
    def write_audit_log(self, entry, max_logs=None):
        self._audit_logs.append(entry)
        if max_logs is not None and len(self._audit_logs) > max_logs:
            newest = sorted(
                enumerate(self._audit_logs),
                key=lambda item: (item[1].timestamp, item[0]),
                reverse=True,
            )[:max_logs]
            keep = {id(entry) for _, entry in newest}
            self._audit_logs = [e for e in self._audit_logs if id(e) in keep]
        return entry.id

    def read_audit_logs(
        self,
        limit=None,
        entity_type=None,
        action=None,
        from_date=None,
        to_date=None,
        entity_id=None,
    ):
        results = list(enumerate(self._audit_logs))
        if entity_type:
            results = [r for r in results if r[1].entity_type.value == entity_type]
        if action:
            results = [r for r in results if r[1].action.value == action]
        if entity_id:
            results = [r for r in results if r[1].entity_id == entity_id]
        if from_date:
            results = [r for r in results if r[1].timestamp >= from_date]
        if to_date:
            results = [r for r in results if r[1].timestamp <= to_date]
        results.sort(key=lambda r: (r[1].timestamp, r[0]), reverse=True)
        logs = [entry for _, entry in results]
        if limit:
            logs = logs[:limit]
        return logs


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_storage():
    """Fresh MockStorage instance for each test."""
    return MockStorage()


@pytest.fixture
def sample_components():
    """
    Small data-center inventory.

        lb ─> web
        db ─> api ─> web
                 └─> reports
        cache (isolated)
    """
    return [
        make_component("lb", "Edge LB", ComponentType.LOAD_BALANCER, criticality=Criticality.HIGH),
        make_component("db", "Primary DB", ComponentType.DATABASE, criticality=Criticality.CRITICAL),
        make_component("api", "Orders API", ComponentType.API, criticality=Criticality.HIGH),
        make_component("web", "Web Shop", ComponentType.APPLICATION, criticality=Criticality.HIGH),
        make_component("reports", "Reporting", ComponentType.SERVICE, criticality=Criticality.LOW),
        make_component("cache", "Redis Cache", ComponentType.DATABASE, criticality=Criticality.MEDIUM),
    ]


@pytest.fixture
def sample_dependencies():
    return [
        make_dependency("lb", "web", dependency_type=DependencyType.FEEDS),
        make_dependency("db", "api", criticality=Criticality.CRITICAL),
        make_dependency("api", "web", criticality=Criticality.HIGH),
        make_dependency("api", "reports", dependency_type=DependencyType.USES),
    ]


@pytest.fixture
def sample_workflows():
    return [
        make_workflow(
            "checkout",
            [
                make_step("browse", primary=["web"], order=1),
                make_step("pay", primary=["api"], alternatives=["cache"], order=2),
            ],
            name="Checkout",
        ),
        make_workflow(
            "month-end",
            [make_step("report", primary=["reports"], order=1)],
            name="Month-end Reporting",
            criticality=Criticality.MEDIUM,
            business_process="Record to Report",
        ),
    ]


@pytest.fixture
def populated_storage(mock_storage, sample_components, sample_dependencies, sample_workflows):
    """MockStorage pre-populated with the sample inventory."""
    for component in sample_components:
        mock_storage.write_component(component)
    for dependency in sample_dependencies:
        mock_storage.write_dependency(dependency)
    for workflow in sample_workflows:
        mock_storage.write_workflow(workflow)
    return mock_storage


@pytest.fixture
def client():
    """FastAPI test client for integration tests."""
    from assetwatch.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def trace_headers():
    """Request headers carrying a trace id."""
    return {"X-Request-ID": str(_uuid.uuid4())}


@pytest.fixture
def now():
    """Fixed 'now' for time-dependent tests, mid-hour."""
    return BASE_TIME + timedelta(minutes=30)
