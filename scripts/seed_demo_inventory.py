#!/usr/bin/env python3
"""
Seed a demo trading-desk inventory for AssetWatch.

Populates the database with components, dependency edges and business
workflows through the InventoryService, so every write lands in the audit
log exactly as it would through the API. Optionally takes one component
offline so the dashboard shows a live cascade.

Usage:
    python scripts/seed_demo_inventory.py
    python scripts/seed_demo_inventory.py --outage ids-db --reset
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

import structlog

sys.path.insert(0, str(Path(__file__).parent.parent))

from assetwatch.engine.impact import ImpactAnalyzer
from assetwatch.engine.monitors import HealthScorer
from assetwatch.models.enums import (
    ComponentStatus,
    ComponentType,
    Criticality,
    DependencyType,
)
from assetwatch.models.inventory import Component, Dependency, Workflow, WorkflowStep
from assetwatch.services import (
    DependencyValidationError,
    get_inventory_service,
)
from assetwatch.storage import StorageError, get_storage
from assetwatch.utils.logging import configure_logging

logger = structlog.get_logger()


COMPONENTS = [
    ("core-net", "Core Network", ComponentType.NETWORK, Criticality.CRITICAL, "Prague DC"),
    ("edge-fw", "Edge Firewall", ComponentType.FIREWALL, Criticality.CRITICAL, "Prague DC"),
    ("ids-db", "IDB Database", ComponentType.DATABASE, Criticality.CRITICAL, "AWS"),
    ("matching", "Matching Platform", ComponentType.APPLICATION, Criticality.HIGH, "AWS"),
    ("pricing-api", "Pricing API", ComponentType.API, Criticality.HIGH, "AWS"),
    ("bloomberg", "Bloomberg Anywhere", ComponentType.SERVICE, Criticality.CRITICAL, "Cloud"),
    ("lseg", "LSEG Workspace", ComponentType.SERVICE, Criticality.CRITICAL, "Cloud"),
    ("reporting", "Regulatory Reporting", ComponentType.APPLICATION, Criticality.HIGH, "Prague DC"),
    ("mail", "Mail Gateway", ComponentType.SERVICE, Criticality.MEDIUM, "Cloud"),
    ("backup", "Nightly Backup", ComponentType.BACKUP, Criticality.LOW, "Prague DC"),
]

# (source, target, type, criticality): impact flows source -> target
DEPENDENCIES = [
    ("core-net", "edge-fw", DependencyType.FEEDS, Criticality.CRITICAL),
    ("edge-fw", "ids-db", DependencyType.FEEDS, Criticality.CRITICAL),
    ("edge-fw", "bloomberg", DependencyType.FEEDS, Criticality.HIGH),
    ("edge-fw", "lseg", DependencyType.FEEDS, Criticality.HIGH),
    ("ids-db", "pricing-api", DependencyType.FEEDS, Criticality.CRITICAL),
    ("ids-db", "reporting", DependencyType.FEEDS, Criticality.HIGH),
    ("pricing-api", "matching", DependencyType.FEEDS, Criticality.CRITICAL),
    ("ids-db", "backup", DependencyType.MONITORS, Criticality.LOW),
    ("core-net", "mail", DependencyType.FEEDS, Criticality.MEDIUM),
]

WORKFLOWS = [
    Workflow(
        id="trade-execution",
        name="Trade Execution",
        criticality=Criticality.CRITICAL,
        business_process="Front Office",
        steps=[
            WorkflowStep(
                id="quote",
                name="Receive market data",
                primary_component_ids=["bloomberg"],
                alternative_component_ids=["lseg"],
                order=1,
            ),
            WorkflowStep(
                id="price",
                name="Price the order",
                primary_component_ids=["pricing-api"],
                order=2,
            ),
            WorkflowStep(
                id="match",
                name="Match and confirm",
                primary_component_ids=["matching"],
                order=3,
            ),
        ],
    ),
    Workflow(
        id="regulatory-reporting",
        name="Daily Regulatory Report",
        criticality=Criticality.HIGH,
        business_process="Compliance",
        steps=[
            WorkflowStep(
                id="extract",
                name="Extract trades",
                primary_component_ids=["ids-db"],
                order=1,
            ),
            WorkflowStep(
                id="submit",
                name="Submit report",
                primary_component_ids=["reporting"],
                alternative_component_ids=["mail"],
                order=2,
            ),
        ],
    ),
]


def seed(outage: Optional[str]) -> None:
    service = get_inventory_service()

    print("\n" + "=" * 60)
    print("SEEDING DEMO INVENTORY")
    print("=" * 60)

    for component_id, name, component_type, criticality, location in COMPONENTS:
        service.create_component(
            Component(
                id=component_id,
                name=name,
                type=component_type,
                criticality=criticality,
                location=location,
            )
        )
        print(f"  [OK] Component: {name} ({component_type.value}, {criticality.value})")

    for source_id, target_id, dependency_type, criticality in DEPENDENCIES:
        dependency = service.create_dependency(
            Dependency(
                id=f"{source_id}--{target_id}",
                source_id=source_id,
                target_id=target_id,
                type=dependency_type,
                criticality=criticality,
            )
        )
        for warning in service.dependency_type_warnings(dependency):
            print(f"       warning: {warning}")
        print(f"  [OK] Dependency: {source_id} -> {target_id}")

    for workflow in WORKFLOWS:
        service.create_workflow(workflow)
        print(f"  [OK] Workflow: {workflow.name} ({len(workflow.steps)} steps)")

    if outage:
        service.update_component(outage, {"status": ComponentStatus.OFFLINE})
        print(f"\n  Outage: {outage} set offline")

    components, dependencies, workflows = service.snapshot()
    snapshot = HealthScorer().compute_snapshot(components, dependencies, workflows)
    ranking = ImpactAnalyzer().compute_analysis_results(
        components, dependencies, workflows, scope="all-components"
    )

    print("\n" + "=" * 60)
    print("DEMO SEED COMPLETE")
    print("=" * 60)
    print(f"  Components:      {snapshot.total_components:>4}")
    print(f"  Dependencies:    {snapshot.total_dependencies:>4}")
    print(f"  Workflows:       {snapshot.total_workflows:>4}")
    print(f"  Network health:  {snapshot.network_health:>5.1f}%")
    print("\n  Highest impact if lost:")
    for result in ranking[:3]:
        print(
            f"    {result.component_name:<22} score {result.business_impact_score:>4}"
            f"  ({result.risk_level.value})"
        )
    print("=" * 60 + "\n")


def main():
    """Main entry point for demo inventory seeding."""
    parser = argparse.ArgumentParser(
        description="Seed a demo IT asset inventory for AssetWatch"
    )
    parser.add_argument(
        "--outage",
        type=str,
        choices=[c[0] for c in COMPONENTS],
        default=None,
        help="Component id to set offline after seeding",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        default=False,
        help="Clear existing data first (requires ASSETWATCH_TESTING=true)",
    )
    args = parser.parse_args()

    configure_logging()

    if args.reset:
        get_storage().clear_for_testing()

    logger.info("demo_seed_started", outage=args.outage, reset=args.reset)

    try:
        seed(args.outage)
        logger.info("demo_seed_successful")
    except (StorageError, DependencyValidationError) as e:
        logger.error("demo_seed_failed", error=str(e), exc_info=True)
        print(f"\nSeeding failed: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
