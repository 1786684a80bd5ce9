"""Filesystem scanning utilities for mystream-indexer."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Sequence

from core.config.schema import DEFAULT_ALLOW_EXTS
from utils.fs import resolve_path

DEFAULT_EXTENSIONS = set(DEFAULT_ALLOW_EXTS)


def _normalise_exts(extensions: Iterable[str] | None) -> set[str]:
    base = extensions or DEFAULT_EXTENSIONS
    out: set[str] = set()
    for e in base:
        s = str(e).lower()
        if not s.startswith("."):
            s = "." + s
        out.add(s)
    return out


def _is_under(path: Path, parent: Path) -> bool:
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def iter_media_files(
    root: Path | str,
    *,
    excluded: Sequence[Path | str] | None = None,
    extensions: Iterable[str] | None = None,
) -> Iterator[Path]:
    """Recursively yield media files under ``root``.

    Extensions match case-insensitively with or without a leading dot; anything
    under ``excluded`` or under a dot-prefixed component (relative to ``root``)
    is skipped.
    """
    exts = _normalise_exts(extensions)
    exc = [resolve_path(p) for p in (excluded or [])]
    base = resolve_path(root)
    if not base.exists():
        return

    for p in sorted(base.rglob("*")):
        try:
            if not p.is_file():
                continue
        except OSError:
            continue

        if p.suffix.lower() not in exts:
            continue

        if any(_is_under(p, e) for e in exc):
            continue

        try:
            rel = p.relative_to(base)
        except ValueError:
            rel = p
        if any(part.startswith(".") for part in rel.parts):
            continue

        yield p


__all__ = ["DEFAULT_EXTENSIONS", "iter_media_files"]
