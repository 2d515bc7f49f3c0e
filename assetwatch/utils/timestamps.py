"""
Timestamp convention.

Every stored and computed timestamp is naive UTC, the same convention as
``datetime.utcnow()``. Offset-aware input (``...Z``, ``+02:00``) is
converted once at the model boundary so the engine never compares aware
and naive values.
"""

from datetime import datetime, timezone
from typing import Optional


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values and None pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
