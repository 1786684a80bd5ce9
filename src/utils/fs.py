"""Filesystem helpers shared across mystream-indexer modules."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

WINDOWS = os.name == "nt"


def is_hidden(path: Path) -> bool:
    """Identify dot-prefixed files and directories."""
    name = Path(path).name
    return name.startswith(".") and name not in (".", "..")


def resolve_path(path: str | Path) -> Path:
    """Expand and resolve ``path`` without requiring it to exist."""
    candidate = Path(path).expanduser()
    try:
        return candidate.resolve(strict=False)
    except OSError:
        return candidate.absolute()


def to_unix_path(path: str | Path) -> str:
    """Return ``path`` with forward slashes regardless of platform."""
    text = str(path)
    if WINDOWS:
        text = text.replace("\\", "/")
    return text


def clip_path(path: str | Path, root: str | Path) -> str:
    """Express ``path`` relative to ``root`` as a ``/``-prefixed POSIX path.

    Paths outside ``root`` are returned unchanged (in POSIX form).
    """
    candidate = Path(path)
    try:
        relative = candidate.relative_to(Path(root))
    except ValueError:
        return to_unix_path(candidate)
    return "/" + relative.as_posix()


def mtime_token(path: str | Path) -> str:
    """Return the coarse modification-time token for ``path``.

    The token has one-second resolution and is only ever compared for string
    equality. Raises :class:`OSError` when the file cannot be stat-ed.
    """
    stamp = os.stat(path).st_mtime
    return datetime.fromtimestamp(int(stamp), tz=timezone.utc).isoformat(timespec="seconds")


def write_text_atomic(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    """Write ``text`` to ``path`` via a temporary sibling and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


__all__ = [
    "WINDOWS",
    "clip_path",
    "is_hidden",
    "mtime_token",
    "resolve_path",
    "to_unix_path",
    "write_text_atomic",
]
