"""Administrative helpers for managing the cache database file."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _resolve_path(db_path: str | Path) -> Path:
    path = Path(db_path).expanduser()
    try:
        return path.resolve(strict=False)
    except OSError:
        return path.absolute()


def sidecar_paths(db_path: str | Path) -> tuple[Path, Path, Path]:
    """Return the database file and its WAL/SHM companions."""
    resolved = _resolve_path(db_path)
    return (
        resolved,
        resolved.with_name(f"{resolved.name}-wal"),
        resolved.with_name(f"{resolved.name}-shm"),
    )


def discard_database(db_path: str | Path) -> list[Path]:
    """Delete the database file and its sidecars, returning what was removed.

    The caller must close every connection to the target first.
    """
    removed: list[Path] = []
    for candidate in sidecar_paths(db_path):
        if not candidate.exists():
            continue
        try:
            candidate.unlink()
        except OSError:
            logger.exception("Failed to remove %s", candidate)
            raise
        removed.append(candidate)
    return removed


__all__ = ["discard_database", "sidecar_paths"]
