"""Remove cache entries whose paths the watcher no longer tracks."""

from __future__ import annotations

import logging
from typing import Iterable

from db.cache import CacheStore

logger = logging.getLogger(__name__)


def reap_orphans(store: CacheStore, current_paths: Iterable[str]) -> list[str]:
    """Delete every cached record not in ``current_paths``; return the removed paths."""

    keep = set(current_paths)
    orphans = [record.path for record in store.all_records() if record.path not in keep]
    for path in orphans:
        store.remove(path)
    if orphans:
        logger.info("Reaped %d orphaned cache record(s)", len(orphans))
    return orphans


__all__ = ["reap_orphans"]
