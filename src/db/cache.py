"""Persistent, self-healing cache of per-file indexing state."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from threading import RLock
from typing import Iterable

from db.admin import discard_database
from db.connection import get_conn
from db.files import (
    FileRecord,
    clear_dirty_flags,
    delete_record,
    get_record,
    list_records,
    upsert_record,
)
from db.schema import StoreCorruptionError, ensure_schema, verify_schema

logger = logging.getLogger(__name__)


class CacheStore:
    """Mapping from absolute file path to :class:`FileRecord`, backed by SQLite.

    Writes accumulate in the open transaction until :meth:`persist` commits
    them. A cache file that cannot be opened or has an unexpected structure is
    discarded by :meth:`load` and replaced with an empty one.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = RLock()

    @property
    def db_path(self) -> str | Path:
        return self._db_path

    @property
    def is_loaded(self) -> bool:
        return self._conn is not None

    def load(self) -> bool:
        """Open the persisted cache; return ``True`` if it had to be reset."""

        with self._lock:
            self.close()
            reset = False
            try:
                conn = self._open_verified()
            except StoreCorruptionError as exc:
                logger.warning("Cache at %s is corrupt (%s); resetting", self._db_path, exc)
                if str(self._db_path) != ":memory:":
                    discard_database(self._db_path)
                conn = get_conn(self._db_path)
                reset = True
            ensure_schema(conn)
            self._conn = conn
            logger.info("Cache loaded from %s (%d record(s))", self._db_path, self.count())
            return reset

    def _open_verified(self) -> sqlite3.Connection:
        try:
            conn = get_conn(self._db_path)
        except sqlite3.DatabaseError as exc:
            raise StoreCorruptionError(str(exc)) from exc
        try:
            verify_schema(conn)
        except StoreCorruptionError:
            conn.close()
            raise
        return conn

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("CacheStore.load() must be called before use")
        return self._conn

    def get(self, path: str) -> FileRecord | None:
        with self._lock:
            return get_record(self._require_conn(), path)

    def upsert(self, record: FileRecord) -> None:
        with self._lock:
            upsert_record(self._require_conn(), record)

    def remove(self, path: str) -> bool:
        with self._lock:
            return delete_record(self._require_conn(), path)

    def all_records(self) -> list[FileRecord]:
        with self._lock:
            return list_records(self._require_conn())

    def dirty_records(self) -> list[FileRecord]:
        with self._lock:
            return list_records(self._require_conn(), dirty_only=True)

    def clear_dirty(self, paths: Iterable[str]) -> None:
        with self._lock:
            clear_dirty_flags(self._require_conn(), list(paths))

    def count(self) -> int:
        with self._lock:
            row = self._require_conn().execute("SELECT COUNT(*) FROM cache_entries").fetchone()
            return int(row[0])

    def clear(self) -> None:
        with self._lock:
            self._require_conn().execute("DELETE FROM cache_entries")

    def persist(self) -> None:
        """Commit pending changes; safe to call repeatedly."""

        with self._lock:
            self._require_conn().commit()

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.commit()
            finally:
                self._conn.close()
                self._conn = None


__all__ = ["CacheStore", "FileRecord"]
