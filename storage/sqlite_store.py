# storage/sqlite_store.py
"""
SQLite-backed key-value store.

Holds opaque string values (the correction log is one JSON document under a
fixed key). Mirrors the getItem/setItem/removeItem surface of a mobile
key-value store.
"""
from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from .schema import (
    ALL_TABLES,
    CREATE_KV_STORE,
    CREATE_SCHEMA_VERSION,
    SCHEMA_VERSION,
)


def open_conn(path: Union[str, Path] = "data/expcat.sqlite") -> sqlite3.Connection:
    """Open a database connection with row factory."""
    p = str(path)
    if p != ":memory:":
        Path(p).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(p)
    conn.row_factory = sqlite3.Row
    return conn


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version, or 0 if not initialized."""
    cur = conn.cursor()
    try:
        cur.execute("SELECT MAX(version) FROM schema_version")
        row = cur.fetchone()
        return row[0] if row and row[0] else 0
    except sqlite3.OperationalError:
        # schema_version table doesn't exist
        return 0


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    """Check if a table exists."""
    cur = conn.cursor()
    cur.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,),
    )
    return cur.fetchone() is not None


def ensure_schema(conn: sqlite3.Connection) -> Dict[str, object]:
    """Create tables if needed and record the schema version."""
    current = get_schema_version(conn)
    cur = conn.cursor()
    cur.execute(CREATE_SCHEMA_VERSION)
    cur.execute(CREATE_KV_STORE)
    if current < SCHEMA_VERSION:
        cur.execute(
            "INSERT OR REPLACE INTO schema_version (version, applied_at) VALUES (?, ?)",
            (SCHEMA_VERSION, datetime.now(timezone.utc).isoformat()),
        )
    conn.commit()
    status = "current" if current == SCHEMA_VERSION else "initialized"
    return {"status": status, "version": SCHEMA_VERSION}


def get_table_stats(conn: sqlite3.Connection) -> Dict[str, Optional[int]]:
    """Row counts per table (None when a table is missing)."""
    stats: Dict[str, Optional[int]] = {}
    for table in ALL_TABLES:
        if table_exists(conn, table):
            row = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
            stats[table] = row[0]
        else:
            stats[table] = None
    return stats


class SQLiteKVStore:
    """
    Key-value store on a single SQLite table.
    The connection opens lazily and the schema is ensured on first use.
    """

    def __init__(self, db_path: Union[str, Path] = "data/expcat.sqlite"):
        self.db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = open_conn(self.db_path)
            ensure_schema(self._conn)
        return self._conn

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_item(self, key: str) -> Optional[str]:
        row = self.conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        self.conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value),
        )
        self.conn.commit()

    def remove_item(self, key: str) -> None:
        self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self.conn.commit()

    def keys(self) -> List[str]:
        rows = self.conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        return [r["key"] for r in rows]
