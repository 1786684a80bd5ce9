"""YAML-backed persistence for :class:`IndexerSettings`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from utils.fs import write_text_atomic

from .paths import CONFIG_NAME, AppPaths
from .schema import IndexerSettings

logger = logging.getLogger(__name__)


class SettingsService:
    """Read and write ``config.yaml``; unreadable or invalid files yield defaults."""

    def __init__(self, app_paths: AppPaths, *, filename: str = CONFIG_NAME) -> None:
        self._app_paths = app_paths
        self._filename = filename

    @property
    def config_path(self) -> Path:
        path = self._app_paths.config_path(self._filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def _read_mapping(self, path: Path) -> Any:
        try:
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as exc:
            logger.warning("Unable to read settings from %s: %s", path, exc)
        except yaml.YAMLError as exc:
            logger.warning("Invalid YAML in %s: %s", path, exc)
        return None

    def load(self) -> IndexerSettings:
        path = self.config_path
        if not path.exists():
            logger.debug("No settings file at %s; using defaults", path)
            return IndexerSettings()
        try:
            return IndexerSettings.from_mapping(self._read_mapping(path))
        except ValidationError as exc:
            logger.warning("Ignoring invalid settings in %s: %s", path, exc)
            return IndexerSettings()

    def save(self, settings: IndexerSettings) -> None:
        path = self.config_path
        text = yaml.safe_dump(settings.to_mapping(), sort_keys=False)
        try:
            write_text_atomic(path, text)
        except OSError as exc:
            logger.error("Failed to write settings to %s: %s", path, exc)
            raise


__all__ = ["SettingsService"]
