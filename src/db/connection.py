"""Connection helpers for the mystream-indexer SQLite cache."""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def _resolve_db_target(db_path: str | Path) -> tuple[str, bool]:
    """Normalize database paths and report whether the target is in-memory."""
    text_path = str(db_path)
    if text_path == ":memory:":
        return text_path, True
    candidate = Path(text_path).expanduser()
    try:
        resolved = candidate.resolve(strict=False)
    except OSError:
        resolved = candidate.absolute()
    return str(resolved), False


def _exec_pragma_retry(cur: sqlite3.Cursor, sql: str, retries: int = 40, sleep_sec: float = 0.1) -> None:
    last: sqlite3.OperationalError | None = None
    for _ in range(retries):
        try:
            cur.execute(sql)
            return
        except sqlite3.OperationalError as exc:
            last = exc
            if "locked" not in str(exc).lower() and "busy" not in str(exc).lower():
                raise
            time.sleep(sleep_sec)
    if last is not None:
        raise last
    raise sqlite3.OperationalError(f"Failed to execute pragma after {retries} attempts: {sql}")


def _apply_pragmas(conn: sqlite3.Connection, *, is_memory: bool) -> None:
    cur = conn.cursor()
    try:
        if not is_memory:
            _exec_pragma_retry(cur, "PRAGMA journal_mode=WAL;")
        # commits must be on disk before a run counts as caught up
        _exec_pragma_retry(cur, "PRAGMA synchronous=FULL;")
        _exec_pragma_retry(cur, "PRAGMA temp_store=MEMORY;")
    finally:
        cur.close()


def get_conn(db_path: str | Path, *, timeout: float = 30.0) -> sqlite3.Connection:
    """Open a SQLite connection usable from the pipeline worker thread.

    Raises :class:`sqlite3.DatabaseError` when the file is not a database.
    """
    target, is_memory = _resolve_db_target(db_path)
    if not is_memory:
        Path(target).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(target, timeout=timeout, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        _apply_pragmas(conn, is_memory=is_memory)
    except sqlite3.DatabaseError:
        conn.close()
        raise
    logger.debug("Opened cache database at %s", target)
    return conn


__all__ = ["get_conn"]
