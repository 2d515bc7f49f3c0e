"""Utility modules for logging and timestamp handling."""

from assetwatch.utils.logging import configure_logging, get_logger
from assetwatch.utils.timestamps import to_naive_utc

__all__ = ["configure_logging", "get_logger", "to_naive_utc"]
