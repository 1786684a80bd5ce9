"""Settings model, per-user paths and the process-wide settings service."""

from __future__ import annotations

from pathlib import Path

from .paths import AppPaths
from .schema import IndexerSettings
from .service import SettingsService

_SERVICE = SettingsService(AppPaths())


def configure(app_paths: AppPaths) -> None:
    """Point the shared service at ``app_paths`` (tests, alternate profiles)."""

    global _SERVICE
    _SERVICE = SettingsService(app_paths)


def config_path() -> Path:
    return _SERVICE.config_path


def load_settings() -> IndexerSettings:
    return _SERVICE.load()


def save_settings(settings: IndexerSettings) -> None:
    _SERVICE.save(settings)


__all__ = [
    "AppPaths",
    "IndexerSettings",
    "SettingsService",
    "config_path",
    "configure",
    "load_settings",
    "save_settings",
]
