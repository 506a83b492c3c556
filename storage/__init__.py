# storage/__init__.py
"""
Storage layer for expcat.

Key-value persistence used by correction memory: SQLite (default),
a single JSON file, or process memory.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .kv_store import JsonFileKVStore, KeyValueStore, MemoryKVStore
from .schema import SCHEMA_VERSION
from .sqlite_store import (
    SQLiteKVStore,
    ensure_schema,
    get_schema_version,
    get_table_stats,
    open_conn,
    table_exists,
)


def open_store(
    backend: str = "sqlite", path: Optional[Union[str, Path]] = None
) -> KeyValueStore:
    """Build a store for a backend name from config ("sqlite" | "json" | "memory")."""
    backend = (backend or "sqlite").lower()
    if backend == "memory":
        return MemoryKVStore()
    if path is None:
        raise ValueError(f"backend '{backend}' needs a path")
    if backend == "sqlite":
        return SQLiteKVStore(path)
    if backend == "json":
        return JsonFileKVStore(path)
    raise ValueError(f"unknown storage backend: {backend}")


__all__ = [
    "KeyValueStore",
    "SQLiteKVStore",
    "JsonFileKVStore",
    "MemoryKVStore",
    "open_store",
    "open_conn",
    "ensure_schema",
    "get_schema_version",
    "get_table_stats",
    "table_exists",
    "SCHEMA_VERSION",
]
