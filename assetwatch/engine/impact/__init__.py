"""
Cascading Impact Analysis Engine.

This package computes which components, workflows and workflow steps are
transitively affected by unhealthy components, and ranks root causes by a
business impact score.

Components:
    build_forward_map: Forward adjacency over the dependency list
    traverse_downstream / bfs_impact_map: Downstream reachability and causal attribution
    ImpactAnalyzer: Per-root impact reports and ranked batch analysis
    ImpactScorer: Business impact score and risk classification

Example:
    >>> from assetwatch.engine.impact import ImpactAnalyzer
    >>> analyzer = ImpactAnalyzer()
    >>> results = analyzer.compute_analysis_results(components, dependencies, workflows)
    >>> print(f"Top root cause: {results[0].component_name}")
"""

from .analyzer import ImpactAnalyzer
from .graph_builder import build_forward_map
from .reachability import bfs_impact_map, compute_impacted_from_offlines, traverse_downstream
from .scorer import ImpactScorer

__all__ = [
    "ImpactAnalyzer",
    "ImpactScorer",
    "bfs_impact_map",
    "build_forward_map",
    "compute_impacted_from_offlines",
    "traverse_downstream",
]
