"""Database schema management for the mystream-indexer file cache."""

from __future__ import annotations

import sqlite3

CURRENT_SCHEMA_VERSION = 1

CACHE_TABLE = "cache_entries"
CACHE_COLUMNS = ("path", "mtime", "tag_data", "is_valid", "dirty", "updated_at")

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS cache_entries (
        path TEXT PRIMARY KEY,
        mtime TEXT,
        tag_data TEXT,
        is_valid INTEGER NOT NULL DEFAULT 0,
        dirty INTEGER NOT NULL DEFAULT 0,
        updated_at REAL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_cache_entries_dirty ON cache_entries(dirty);
    """,
)


class StoreCorruptionError(Exception):
    """Raised when a persisted cache cannot be used as-is."""


def _table_exists(conn: sqlite3.Connection, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type IN ('table','view') AND name = ?",
        (name,),
    ).fetchone()
    return row is not None


def get_user_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("PRAGMA user_version").fetchone()
    return int(row[0]) if row else 0


def verify_schema(conn: sqlite3.Connection) -> None:
    """Raise :class:`StoreCorruptionError` unless ``conn`` holds a usable cache.

    An empty database (no tables, version 0) is considered usable; it is
    initialised by :func:`ensure_schema`.
    """
    try:
        version = get_user_version(conn)
        has_table = _table_exists(conn, CACHE_TABLE)
        if not has_table:
            if version not in (0, CURRENT_SCHEMA_VERSION):
                raise StoreCorruptionError(f"unexpected schema version {version}")
            tables = conn.execute("SELECT COUNT(*) FROM sqlite_master WHERE type = 'table'").fetchone()[0]
            if tables:
                raise StoreCorruptionError(f"missing {CACHE_TABLE} table")
            return
        if version != CURRENT_SCHEMA_VERSION:
            raise StoreCorruptionError(f"unexpected schema version {version}")
        columns = {row[1] for row in conn.execute(f"PRAGMA table_info({CACHE_TABLE})").fetchall()}
        missing = [column for column in CACHE_COLUMNS if column not in columns]
        if missing:
            raise StoreCorruptionError(f"missing columns: {', '.join(missing)}")
        conn.execute(f"SELECT COUNT(*) FROM {CACHE_TABLE}").fetchone()
    except sqlite3.DatabaseError as exc:
        raise StoreCorruptionError(str(exc)) from exc


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create the cache table if needed and stamp the schema version."""
    for statement in SCHEMA_STATEMENTS:
        conn.execute(statement)
    conn.execute(f"PRAGMA user_version = {CURRENT_SCHEMA_VERSION}")
    conn.commit()


__all__ = [
    "CACHE_COLUMNS",
    "CACHE_TABLE",
    "CURRENT_SCHEMA_VERSION",
    "StoreCorruptionError",
    "ensure_schema",
    "get_user_version",
    "verify_schema",
]
