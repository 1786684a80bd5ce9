"""Plain-text log of per-file failures, shown to users after each run."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock

logger = logging.getLogger(__name__)


class ErrorLog:
    """Append-only sink truncated at the start of every run.

    Writes are best-effort: I/O errors go to :mod:`logging` and are not raised.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def reset(self) -> None:
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text("", encoding="utf-8")
            except OSError as exc:
                logger.warning("Could not truncate error log %s: %s", self._path, exc)

    def write(self, subject: str, description: str) -> None:
        line = f"{subject} : {description}"
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as exc:
                logger.warning("Could not append to error log %s: %s", self._path, exc)

    def read_lines(self) -> list[str]:
        try:
            return self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []


__all__ = ["ErrorLog"]
