"""
Persistence for the inventory and its audit log.

``get_storage()`` returns the process-wide DuckDB backend configured by
``Settings.db_path``; FastAPI dependencies and the seed script share it.
"""

from functools import lru_cache

from assetwatch.config import get_settings

from .base import StorageBackend
from .duckdb_storage import DuckDBStorage, StorageError


@lru_cache
def get_storage() -> StorageBackend:
    return DuckDBStorage(db_path=get_settings().db_path)


__all__ = ["StorageBackend", "DuckDBStorage", "StorageError", "get_storage"]
