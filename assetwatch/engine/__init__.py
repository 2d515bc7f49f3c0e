"""
AssetWatch analysis engine.

This package contains the pure computations behind the inventory dashboard:

- Impact analysis: forward adjacency, downstream reachability, per-root
  impact reports with business impact scores and risk levels
- Monitors: derived alerts and the effective health snapshot and trend
- Validation: write-side dependency checks and graph-wide structural reports

All engine components are designed for:
- Determinism (same snapshot in, same result out)
- Statelessness (no caches, every call recomputes from explicit inputs)
- Comprehensive observability (structured logging with request IDs)
- Type safety (complete Pydantic validation at the model boundary)
"""

__version__ = "1.0.0"

__all__ = [
    "ImpactAnalyzer",
    "AlertGenerator",
    "HealthScorer",
    "DependencyValidator",
]

from assetwatch.engine.impact import ImpactAnalyzer
from assetwatch.engine.monitors import AlertGenerator, HealthScorer
from assetwatch.engine.validation import DependencyValidator
