"""Helpers for manipulating the ``cache_entries`` table."""

from __future__ import annotations

import json
import sqlite3
import time
from dataclasses import dataclass

from tags.base import TagData


@dataclass
class FileRecord:
    """Cached state of one indexed path."""

    path: str
    mtime: str | None = None
    tag_data: TagData | None = None
    is_valid: bool = False
    dirty: bool = False


def _encode_tag_data(tag_data: TagData | None) -> str | None:
    if tag_data is None:
        return None
    return json.dumps(tag_data.to_mapping(), ensure_ascii=False, sort_keys=True)


def _decode_tag_data(value: object) -> TagData | None:
    if value in (None, ""):
        return None
    try:
        payload = json.loads(str(value))
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return TagData.from_mapping(payload)


def row_to_record(row: sqlite3.Row) -> FileRecord:
    mtime = row["mtime"]
    return FileRecord(
        path=str(row["path"]),
        mtime=None if mtime is None else str(mtime),
        tag_data=_decode_tag_data(row["tag_data"]),
        is_valid=bool(row["is_valid"]),
        dirty=bool(row["dirty"]),
    )


def get_record(conn: sqlite3.Connection, path: str) -> FileRecord | None:
    row = conn.execute("SELECT * FROM cache_entries WHERE path = ?", (path,)).fetchone()
    return None if row is None else row_to_record(row)


def upsert_record(conn: sqlite3.Connection, record: FileRecord) -> None:
    """Insert or replace the row keyed by ``record.path``."""
    conn.execute(
        """
        INSERT INTO cache_entries (path, mtime, tag_data, is_valid, dirty, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(path) DO UPDATE SET
            mtime = excluded.mtime,
            tag_data = excluded.tag_data,
            is_valid = excluded.is_valid,
            dirty = excluded.dirty,
            updated_at = excluded.updated_at
        """,
        (
            record.path,
            record.mtime,
            _encode_tag_data(record.tag_data),
            int(bool(record.is_valid)),
            int(bool(record.dirty)),
            time.time(),
        ),
    )


def delete_record(conn: sqlite3.Connection, path: str) -> bool:
    cursor = conn.execute("DELETE FROM cache_entries WHERE path = ?", (path,))
    return cursor.rowcount > 0


def list_records(conn: sqlite3.Connection, *, dirty_only: bool = False) -> list[FileRecord]:
    sql = "SELECT * FROM cache_entries"
    if dirty_only:
        sql += " WHERE dirty = 1"
    sql += " ORDER BY path ASC"
    return [row_to_record(row) for row in conn.execute(sql).fetchall()]


def clear_dirty_flags(conn: sqlite3.Connection, paths: list[str]) -> None:
    conn.executemany("UPDATE cache_entries SET dirty = 0 WHERE path = ?", [(path,) for path in paths])


__all__ = [
    "FileRecord",
    "clear_dirty_flags",
    "delete_record",
    "get_record",
    "list_records",
    "row_to_record",
    "upsert_record",
]
