"""
Graph Builder: forward adjacency over the dependency list.

Builds the ``source_id -> [target_id, ...]`` map every traversal in the
engine runs on. Parallel edges are kept (traversals are visited-set
guarded, so multiplicity has no effect on results) and adjacency lists
preserve dependency list order, which is what makes traversal tie-breaks
stable.

Version: graph_builder_v1
"""

from collections.abc import Iterable, Sequence
from typing import Optional

from assetwatch.models.inventory import Dependency

ForwardMap = dict[str, list[str]]


def require_sequence(name: str, value) -> None:
    """
    Fail fast when an engine input is not a list or tuple.

    Non-list inputs are contract violations by the caller, not data problems
    the engine tolerates.

    Raises:
        TypeError: If ``value`` is not a list or tuple
    """
    if not isinstance(value, (list, tuple)):
        raise TypeError(
            f"{name} must be a list, got {type(value).__name__}"
        )


def build_forward_map(
    dependencies: Sequence[Dependency],
    visible_ids: Optional[Iterable[str]] = None,
) -> ForwardMap:
    """
    Build forward adjacency from a dependency list in O(E).

    Args:
        dependencies: Dependency edges
        visible_ids: Optional scope; when given, only edges whose source and
            target are both visible are included

    Returns:
        Dict mapping source id to the list of its target ids

    Example:
        >>> fwd = build_forward_map([Dependency(source_id="a", target_id="b")])
        >>> fwd
        {'a': ['b']}
    """
    require_sequence("dependencies", dependencies)
    allowed = set(visible_ids) if visible_ids is not None else None

    forward: ForwardMap = {}
    for dep in dependencies:
        if allowed is not None and (
            dep.source_id not in allowed or dep.target_id not in allowed
        ):
            continue
        forward.setdefault(dep.source_id, []).append(dep.target_id)

    return forward
