"""
Integration tests for the AssetWatch API.

Runs the FastAPI app against the real DuckDB backend (a temporary file set
up in conftest). Every test starts from a cleared database seeded with the
sample inventory.

Endpoints covered:
- System: health
- Components, dependencies, workflows: CRUD and error mapping
- Analysis: per-root impact and ranked results
- Alerts, health snapshot and trend
- Audit log and activity summary
- Validation: cycles, single points of failure, candidate edges
"""

import pytest

from assetwatch.engine.validation import CYCLE_ERROR
from assetwatch.storage import get_storage


@pytest.fixture(autouse=True)
def populate_real_storage(sample_components, sample_dependencies, sample_workflows):
    """
    Seed the real DuckDB storage with the sample inventory.
    Storage persists across tests, so it is cleared first.
    """
    storage = get_storage()
    storage.clear_for_testing()

    for component in sample_components:
        storage.write_component(component)
    for dependency in sample_dependencies:
        storage.write_dependency(dependency)
    for workflow in sample_workflows:
        storage.write_workflow(workflow)

    yield


# ============================================================================
# System Endpoints
# ============================================================================


class TestSystemEndpoints:
    """System health endpoints."""

    def test_root_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_system_health_counts_components(self, client):
        response = client.get("/api/v1/system/health")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["database"] == "healthy"
        assert data["inventory"] == {"components": 6, "dependencies": 4, "workflows": 2}

    def test_request_id_echoed(self, client, trace_headers):
        response = client.get("/health", headers=trace_headers)
        assert response.headers["X-Request-ID"] == trace_headers["X-Request-ID"]


# ============================================================================
# Inventory Endpoints
# ============================================================================


class TestComponentEndpoints:
    """Component CRUD."""

    def test_list_components_in_creation_order(self, client):
        response = client.get("/api/v1/components/")
        assert response.status_code == 200
        ids = [c["id"] for c in response.json()["data"]]
        assert ids == ["lb", "db", "api", "web", "reports", "cache"]

    def test_list_components_status_filter(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        response = client.get("/api/v1/components/", params={"status": "offline"})
        assert [c["id"] for c in response.json()["data"]] == ["db"]

    def test_get_component_not_found(self, client):
        response = client.get("/api/v1/components/ghost")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_create_component(self, client):
        response = client.post(
            "/api/v1/components/",
            json={"name": "Edge Firewall", "type": "firewall", "criticality": "high"},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "online"

        fetched = client.get(f"/api/v1/components/{data['id']}")
        assert fetched.json()["data"]["name"] == "Edge Firewall"

    def test_create_component_invalid_type(self, client):
        response = client.post(
            "/api/v1/components/", json={"name": "Toaster", "type": "toaster"}
        )
        assert response.status_code == 422

    def test_update_component_status(self, client):
        response = client.patch("/api/v1/components/db", json={"status": "maintenance"})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "maintenance"
        assert response.json()["data"]["name"] == "Primary DB"

    def test_delete_component_cascades(self, client):
        response = client.delete("/api/v1/components/api")
        assert response.status_code == 200
        assert sorted(response.json()["data"]["deleted_dependency_ids"]) == [
            "dep-api-reports", "dep-api-web", "dep-db-api"
        ]

        remaining = client.get("/api/v1/dependencies/").json()["data"]
        assert [d["id"] for d in remaining] == ["dep-lb-web"]


class TestDependencyEndpoints:
    """Validated dependency CRUD."""

    def test_list_dependencies_for_component(self, client):
        response = client.get("/api/v1/dependencies/", params={"component_id": "api"})
        ids = [d["id"] for d in response.json()["data"]]
        assert ids == ["dep-db-api", "dep-api-web", "dep-api-reports"]

    def test_create_dependency_with_type_warning(self, client):
        response = client.post(
            "/api/v1/dependencies/",
            json={"source_id": "cache", "target_id": "web", "type": "requires"},
        )
        assert response.status_code == 201
        assert response.json()["warnings"] == ["database typically doesn't require application"]

    def test_create_dependency_cycle_rejected(self, client):
        response = client.post(
            "/api/v1/dependencies/", json={"source_id": "reports", "target_id": "db"}
        )
        assert response.status_code == 422
        assert response.json()["errors"] == [CYCLE_ERROR]

    def test_create_dependency_missing_endpoint(self, client):
        response = client.post(
            "/api/v1/dependencies/", json={"source_id": "db", "target_id": "ghost"}
        )
        assert response.status_code == 404

    def test_update_dependency_criticality(self, client):
        response = client.patch(
            "/api/v1/dependencies/dep-lb-web", json={"criticality": "critical"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["criticality"] == "critical"

    def test_delete_dependency(self, client):
        assert client.delete("/api/v1/dependencies/dep-lb-web").status_code == 200
        assert client.get("/api/v1/dependencies/dep-lb-web").status_code == 404


class TestWorkflowEndpoints:
    """Workflow CRUD."""

    def test_list_workflows(self, client):
        response = client.get("/api/v1/workflows/")
        assert [w["id"] for w in response.json()["data"]] == ["checkout", "month-end"]

    def test_get_workflow_preserves_steps(self, client):
        data = client.get("/api/v1/workflows/checkout").json()["data"]
        assert [s["id"] for s in data["steps"]] == ["browse", "pay"]
        assert data["steps"][1]["alternative_component_ids"] == ["cache"]

    def test_create_and_delete_workflow(self, client):
        response = client.post(
            "/api/v1/workflows/",
            json={
                "name": "Payroll",
                "criticality": "critical",
                "business_process": "Hire to Retire",
                "steps": [{"name": "Run payroll", "primary_component_ids": ["db"]}],
            },
        )
        assert response.status_code == 201
        workflow_id = response.json()["data"]["id"]

        assert client.delete(f"/api/v1/workflows/{workflow_id}").status_code == 200
        assert client.get(f"/api/v1/workflows/{workflow_id}").status_code == 404


# ============================================================================
# Analysis, Alerts and Health Endpoints
# ============================================================================


class TestAnalysisEndpoints:
    """Impact analysis."""

    def test_impact_for_database(self, client):
        response = client.get("/api/v1/analysis/impact/db")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["business_impact_score"] == 200
        assert data["risk_level"] == "critical"
        assert data["impacted_components"] == ["Orders API", "Web Shop", "Reporting"]

    def test_impact_for_unknown_component(self, client):
        data = client.get("/api/v1/analysis/impact/ghost").json()["data"]
        assert data["component_name"] == "Unknown"
        assert data["business_impact_score"] == 0

    def test_results_default_scope_empty_when_all_online(self, client):
        response = client.get("/api/v1/analysis/results")
        assert response.json()["data"] == []
        assert response.json()["scope"] == "non-online"

    def test_results_all_components_ranked(self, client):
        response = client.get("/api/v1/analysis/results", params={"scope": "all-components"})
        ids = [r["component_id"] for r in response.json()["data"]]
        assert ids == ["db", "api", "lb", "web", "reports", "cache"]

    def test_analysis_run_is_audited(self, client):
        client.get("/api/v1/analysis/impact/db")
        logs = client.get("/api/v1/audit/logs", params={"entity_type": "SYSTEM"}).json()["data"]
        assert logs[0]["action"] == "ANALYSIS"
        assert logs[0]["details"]["target_component"] == "Primary DB"


class TestAlertEndpoints:
    """Dashboard alerts."""

    def test_no_alerts_when_all_online(self, client):
        response = client.get("/api/v1/alerts/")
        assert response.status_code == 200
        assert response.json()["total"] == 0

    def test_offline_component_raises_alerts(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        data = client.get("/api/v1/alerts/").json()["data"]
        ids = [a["id"] for a in data]
        assert "offline-db" in ids
        assert "impacted-by-offline-db-web" in ids
        assert ids[-1] == "critical-paths"

    def test_alerts_severity_filter(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        client.patch("/api/v1/components/cache", json={"status": "maintenance"})
        data = client.get("/api/v1/alerts/", params={"severity": "info"}).json()["data"]
        assert [a["id"] for a in data] == ["maintenance-cache"]


class TestHealthEndpoints:
    """Health snapshot and trend."""

    def test_snapshot_all_online(self, client):
        data = client.get("/api/v1/health/snapshot").json()["data"]
        assert data["network_health"] == 100.0
        assert data["total_components"] == 6
        assert data["critical_paths"] == 1
        assert data["business_processes"] == 2

    def test_snapshot_after_outage(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        data = client.get("/api/v1/health/snapshot").json()["data"]
        assert data["network_health"] == 33.3
        assert data["impacted_component_ids"] == ["api", "web", "reports"]

    def test_trend_point_count(self, client):
        response = client.get("/api/v1/health/trend", params={"hours": 3})
        assert response.status_code == 200
        assert len(response.json()["data"]) == 4
        assert response.json()["hours"] == 3

    def test_trend_current_point_reflects_outage(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        data = client.get("/api/v1/health/trend", params={"hours": 2}).json()["data"]
        assert data[-1]["value"] == 33.3
        assert data[-1]["status"] == "destructive"

    def test_trend_rejects_out_of_range_hours(self, client):
        assert client.get("/api/v1/health/trend", params={"hours": 0}).status_code == 422
        assert client.get("/api/v1/health/trend", params={"hours": 169}).status_code == 422


# ============================================================================
# Audit and Validation Endpoints
# ============================================================================


class TestAuditEndpoints:
    """Audit log reads."""

    def test_status_change_is_logged(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        logs = client.get("/api/v1/audit/logs", params={"entity_type": "COMPONENT"}).json()["data"]
        assert logs[0]["entity_id"] == "db"
        assert logs[0]["changes"]["before"]["status"] == "online"
        assert logs[0]["changes"]["after"]["status"] == "offline"

    def test_activity_summary(self, client):
        client.patch("/api/v1/components/db", json={"status": "offline"})
        client.patch("/api/v1/components/db", json={"status": "online"})
        data = client.get("/api/v1/audit/summary").json()["data"]
        assert data["total_actions"] == 2
        assert data["actions_by_type"] == {"UPDATE": 2}
        assert data["top_entities"] == [{"name": "Primary DB", "actions": 2}]


class TestValidationEndpoints:
    """Graph-wide and candidate-edge validation."""

    def test_no_cycles_in_sample(self, client):
        data = client.get("/api/v1/validation/cycles").json()["data"]
        assert data == {"has_cycle": False, "cycles": []}

    def test_single_points_of_failure(self, client):
        response = client.get("/api/v1/validation/single-points-of-failure")
        assert response.json()["data"] == ["api"]
        assert response.json()["threshold"] == 2

    def test_check_candidate_cycle(self, client):
        response = client.post(
            "/api/v1/validation/dependency", json={"source_id": "web", "target_id": "db"}
        )
        data = response.json()["data"]
        assert data["is_valid"] is False
        assert data["errors"] == [CYCLE_ERROR]

        assert len(client.get("/api/v1/dependencies/").json()["data"]) == 4
