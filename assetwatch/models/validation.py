"""
Result models for write-side dependency validation.

Validation never raises for data problems; it returns tagged results the
caller inspects.
"""

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Outcome of validating a new or updated dependency."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class CycleReport(BaseModel):
    """
    All dependency cycles found in a graph.

    Each cycle is the closed path ``[a, b, ..., a]``.
    """

    has_cycle: bool
    cycles: list[list[str]] = Field(default_factory=list)


class TypeCheckResult(BaseModel):
    """Plausibility of a dependency given its endpoint types."""

    is_valid: bool = True
    warnings: list[str] = Field(default_factory=list)
