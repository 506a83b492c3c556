# storage/schema.py
"""
Database schema for the expcat key-value store.

Schema version history:
  v1: kv_store table (key, value, updated_at)
"""
from __future__ import annotations

SCHEMA_VERSION = 1

CREATE_SCHEMA_VERSION = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);
"""

CREATE_KV_STORE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""

ALL_TABLES = ["schema_version", "kv_store"]
