"""
Reachability Engine: downstream traversal over the forward adjacency map.

Two traversals live here:

- ``traverse_downstream``: plain reachability from a set of roots. Membership
  is independent of traversal order because every node is visited once.
- ``bfs_impact_map``: single-root breadth-first traversal that also records,
  for every discovered node, the node that discovered it (``cause_id``) and
  its distance from the root (``depth``). FIFO order means ``depth`` is the
  shortest-path distance. When several predecessors sit on the same BFS
  level the one dequeued first wins, i.e. adjacency insertion order.

Both are visited-set guarded: cycles terminate and nothing is counted twice.
Unknown root ids simply have no outgoing edges.

Version: reachability_v1
"""

from collections import deque
from collections.abc import Iterable, Sequence
from typing import Optional

from assetwatch.models.enums import ComponentStatus
from assetwatch.models.impact import ImpactCause
from assetwatch.models.inventory import Component, Dependency

from .graph_builder import ForwardMap, build_forward_map, require_sequence


def traverse_downstream(
    roots: Iterable[str],
    forward_map: ForwardMap,
    initially_visited: Optional[Iterable[str]] = None,
) -> set[str]:
    """
    Compute every id reachable from any root along forward edges.

    Ids in ``initially_visited`` are never added to the result and are not
    expanded through when reached from another node. Roots are always
    expanded. Seeding ``initially_visited`` with the roots therefore returns
    the downstream set excluding the roots themselves.

    Args:
        roots: Traversal start ids
        forward_map: Output of ``build_forward_map``
        initially_visited: Ids excluded from the result

    Returns:
        Set of reachable ids

    Example:
        >>> fwd = {"A": ["B"], "B": ["C"], "C": ["A"]}
        >>> sorted(traverse_downstream({"A"}, fwd, {"A"}))
        ['B', 'C']
    """
    stop = set(initially_visited) if initially_visited is not None else set()
    visited: set[str] = set()
    impacted: set[str] = set()
    queue: deque[str] = deque(roots)

    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for neighbour in forward_map.get(current, ()):
            if neighbour in stop:
                continue
            if neighbour not in visited:
                impacted.add(neighbour)
                queue.append(neighbour)

    return impacted


def bfs_impact_map(root: str, forward_map: ForwardMap) -> dict[str, ImpactCause]:
    """
    Breadth-first traversal from one root with causal attribution.

    Args:
        root: Traversal start id (never present in the result)
        forward_map: Output of ``build_forward_map``

    Returns:
        Dict mapping each reached id to its ``ImpactCause``, in discovery
        order

    Example:
        >>> fwd = {"A": ["B", "C"], "B": ["D"], "C": ["D"]}
        >>> impact = bfs_impact_map("A", fwd)
        >>> impact["D"].cause_id, impact["D"].depth
        ('B', 2)
    """
    out: dict[str, ImpactCause] = {}
    visited = {root}
    queue: deque[tuple[str, int]] = deque([(root, 0)])

    while queue:
        current, depth = queue.popleft()
        for neighbour in forward_map.get(current, ()):
            if neighbour in visited:
                continue
            visited.add(neighbour)
            out[neighbour] = ImpactCause(cause_id=current, depth=depth + 1)
            queue.append((neighbour, depth + 1))

    return out


def compute_impacted_from_offlines(
    components: Sequence[Component],
    dependencies: Sequence[Dependency],
    visible_ids: Optional[Iterable[str]] = None,
) -> set[str]:
    """
    Cascade from every offline component.

    The offline roots themselves are excluded; they are already down.

    Args:
        components: Status snapshot
        dependencies: Dependency edges
        visible_ids: Optional scope passed through to the graph builder

    Returns:
        Set of ids impacted by at least one offline component
    """
    require_sequence("components", components)
    offline_ids = {
        c.id for c in components if c.status == ComponentStatus.OFFLINE
    }
    if not offline_ids:
        return set()
    forward = build_forward_map(dependencies, visible_ids)
    return traverse_downstream(offline_ids, forward, offline_ids)
