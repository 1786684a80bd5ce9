"""Process-wide :class:`AppPaths` used by the command line and scheduler wiring."""

from __future__ import annotations

from pathlib import Path

from core.config import AppPaths

_APP_PATHS = AppPaths()


def set_app_paths(app_paths: AppPaths) -> None:
    """Swap the shared instance, e.g. to point a test at ``tmp_path``."""

    global _APP_PATHS
    _APP_PATHS = app_paths


def get_cache_db_path() -> Path:
    return _APP_PATHS.cache_db_path()


def get_error_log_path() -> Path:
    return _APP_PATHS.error_log_path()


def get_log_dir() -> Path:
    return _APP_PATHS.log_dir()


def ensure_dirs() -> None:
    _APP_PATHS.ensure_data_dirs()


__all__ = [
    "ensure_dirs",
    "get_cache_db_path",
    "get_error_log_path",
    "get_log_dir",
    "set_app_paths",
]
