"""
Dependency Validator: write-side checks for the dependency graph.

The analysis engine tolerates self-loops, duplicates and cycles; the
inventory service calls this validator before persisting an edge so that
such data is rejected at the door instead.

Checks:
- Self-loop: a component cannot depend on itself
- Duplicate: one edge per (source, target) pair
- Cycle creation: the new edge must not close a directed cycle
- Type plausibility: advisory warnings from a small rule table

Graph-wide reports:
- All cycles (iterative DFS with an explicit stack)
- Single points of failure (fan-out hubs with at most one upstream)

Version: dependency_validator_v1
"""

from collections.abc import Sequence

import networkx as nx
import structlog

from assetwatch.models.enums import ComponentType, DependencyType
from assetwatch.models.inventory import Dependency
from assetwatch.models.validation import CycleReport, TypeCheckResult, ValidationResult

from .impact.graph_builder import build_forward_map, require_sequence

logger = structlog.get_logger()


SELF_LOOP_ERROR = "An IT asset cannot depend on itself"
DUPLICATE_ERROR = "This dependency already exists"
CYCLE_ERROR = "This dependency would create a circular dependency"

DEFAULT_SPOF_THRESHOLD = 2

# Allowed target types per (source type, dependency type). Pairs without a
# rule are not checked.
DEPENDENCY_TYPE_RULES: dict[ComponentType, dict[DependencyType, set[ComponentType]]] = {
    ComponentType.LOAD_BALANCER: {
        DependencyType.FEEDS: {ComponentType.SERVER, ComponentType.APPLICATION},
        DependencyType.REQUIRES: {ComponentType.NETWORK},
        DependencyType.USES: {ComponentType.NETWORK},
    },
    ComponentType.API: {
        DependencyType.REQUIRES: {ComponentType.DATABASE, ComponentType.SERVICE},
        DependencyType.USES: {
            ComponentType.DATABASE,
            ComponentType.SERVICE,
            ComponentType.NETWORK,
        },
    },
    ComponentType.APPLICATION: {
        DependencyType.REQUIRES: {ComponentType.API, ComponentType.DATABASE},
        DependencyType.USES: {
            ComponentType.API,
            ComponentType.SERVICE,
            ComponentType.NETWORK,
        },
    },
    ComponentType.DATABASE: {
        DependencyType.REQUIRES: {ComponentType.SERVER, ComponentType.NETWORK},
        DependencyType.MONITORS: {ComponentType.SERVER},
    },
}

# Verb used in warnings ("api typically doesn't require network")
DEPENDENCY_VERBS = {
    DependencyType.REQUIRES: "require",
    DependencyType.USES: "use",
    DependencyType.FEEDS: "feed",
    DependencyType.MONITORS: "monitor",
}


class DependencyValidator:
    """
    Validates dependency writes and reports graph-wide structural issues.

    Example:
        >>> validator = DependencyValidator()
        >>> result = validator.validate_dependency(
        ...     Dependency(source_id="a", target_id="a"), existing=[]
        ... )
        >>> result.errors
        ['An IT asset cannot depend on itself']
    """

    def __init__(self):
        self.logger = structlog.get_logger()

    def validate_dependency(
        self, new: Dependency, existing: Sequence[Dependency]
    ) -> ValidationResult:
        """
        Validate a new or updated dependency against the existing edges.

        An existing edge with the same id as ``new`` is the record being
        updated and is ignored by every check.

        Args:
            new: Candidate dependency
            existing: Current dependency edges

        Returns:
            ValidationResult; every failing check contributes one error
        """
        require_sequence("existing", existing)
        others = [d for d in existing if d.id != new.id]
        errors: list[str] = []

        if new.source_id == new.target_id:
            errors.append(SELF_LOOP_ERROR)

        if any(
            d.source_id == new.source_id and d.target_id == new.target_id
            for d in others
        ):
            errors.append(DUPLICATE_ERROR)

        if new.source_id != new.target_id and self.would_create_cycle(new, others):
            errors.append(CYCLE_ERROR)

        if errors:
            self.logger.info(
                "dependency_rejected",
                source_id=new.source_id,
                target_id=new.target_id,
                errors=errors,
            )

        return ValidationResult(is_valid=not errors, errors=errors)

    def would_create_cycle(
        self, new: Dependency, existing: Sequence[Dependency]
    ) -> bool:
        """
        Whether adding ``new`` closes a directed cycle.

        True when a path ``target -> ... -> source`` already exists in
        ``existing`` (or when the edge is a self-loop).
        """
        if new.source_id == new.target_id:
            return True

        graph = nx.DiGraph()
        graph.add_edges_from(
            (d.source_id, d.target_id) for d in existing if d.id != new.id
        )
        if new.target_id not in graph or new.source_id not in graph:
            return False
        return nx.has_path(graph, new.target_id, new.source_id)

    def detect_all_cycles(self, dependencies: Sequence[Dependency]) -> CycleReport:
        """
        Find the cycles closed by back edges of a depth-first traversal.

        Nodes are started in first-appearance order over the edge list. Each
        back edge ``u -> v`` reports the current DFS path from ``v`` to ``u``
        closed with ``v``. The traversal uses an explicit stack so deep
        chains cannot exhaust the interpreter's recursion limit.

        Returns:
            CycleReport(has_cycle, cycles)

        Example:
            >>> report = validator.detect_all_cycles(edges_for("A->B", "B->C", "C->A"))
            >>> report.cycles
            [['A', 'B', 'C', 'A']]
        """
        require_sequence("dependencies", dependencies)
        forward = build_forward_map(dependencies)
        nodes = list(
            dict.fromkeys(
                node for d in dependencies for node in (d.source_id, d.target_id)
            )
        )

        visited: set[str] = set()
        cycles: list[list[str]] = []

        for start in nodes:
            if start in visited:
                continue

            visited.add(start)
            on_stack = {start}
            path = [start]
            stack = [(start, iter(forward.get(start, ())))]

            while stack:
                node, neighbours = stack[-1]
                descended = False
                for neighbour in neighbours:
                    if neighbour not in visited:
                        visited.add(neighbour)
                        on_stack.add(neighbour)
                        path.append(neighbour)
                        stack.append((neighbour, iter(forward.get(neighbour, ()))))
                        descended = True
                        break
                    if neighbour in on_stack:
                        cycle_start = path.index(neighbour)
                        cycles.append(path[cycle_start:] + [neighbour])
                if not descended:
                    stack.pop()
                    on_stack.discard(node)
                    path.pop()

        if cycles:
            self.logger.warning("dependency_cycles_detected", cycle_count=len(cycles))

        return CycleReport(has_cycle=bool(cycles), cycles=cycles)

    def find_single_points_of_failure(
        self,
        dependencies: Sequence[Dependency],
        threshold: int = DEFAULT_SPOF_THRESHOLD,
    ) -> list[str]:
        """
        Components many others hang off, with at most one upstream.

        Every edge counts, duplicates included.

        Args:
            dependencies: Dependency edges
            threshold: Minimum outgoing edge count

        Returns:
            Component ids with outgoing >= threshold and incoming <= 1, in
            first-appearance order
        """
        require_sequence("dependencies", dependencies)
        graph = nx.MultiDiGraph()
        graph.add_edges_from((d.source_id, d.target_id) for d in dependencies)

        return [
            node
            for node in graph.nodes
            if graph.out_degree(node) >= threshold and graph.in_degree(node) <= 1
        ]

    def validate_dependency_type(
        self,
        source_type: ComponentType,
        target_type: ComponentType,
        dependency_type: DependencyType,
    ) -> TypeCheckResult:
        """
        Advisory plausibility check of a dependency given its endpoint types.

        Never invalidates; implausible pairs only produce warnings.
        """
        source_type = ComponentType(source_type)
        target_type = ComponentType(target_type)
        dependency_type = DependencyType(dependency_type)

        warnings: list[str] = []
        allowed = DEPENDENCY_TYPE_RULES.get(source_type, {}).get(dependency_type)
        if allowed is not None and target_type not in allowed:
            warnings.append(
                f"{source_type.value} typically doesn't "
                f"{DEPENDENCY_VERBS[dependency_type]} {target_type.value}"
            )

        return TypeCheckResult(is_valid=True, warnings=warnings)
