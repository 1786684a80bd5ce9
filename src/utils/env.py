"""Helpers for interrogating runtime environment flags."""

from __future__ import annotations

import os


def is_headless() -> bool:
    """Return True when the indexer should avoid Qt timers and signals."""
    value = os.environ.get("MSI_HEADLESS", "")
    return value.lower() not in {"", "0", "false", "no"}


__all__ = ["is_headless"]
