"""Where mystream-indexer keeps its configuration, cache and logs."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping

from platformdirs import PlatformDirs

logger = logging.getLogger(__name__)

CACHE_DB_NAME = "cache.db"
ERROR_LOG_NAME = "index-errors.log"
CONFIG_NAME = "config.yaml"


class AppPaths:
    """Resolve per-user directories; ``env`` and the platformdirs factory are injectable.

    The data directory holds the file cache, the per-run error log and the
    ``logs`` folder. Setting ``MSI_DATA_DIR`` relocates all three. Index
    artifacts are not stored here; they live next to the watched media.
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        *,
        app_name: str = "mystream-indexer",
        env_var: str = "MSI_DATA_DIR",
        platform_dirs_factory: Callable[[str], PlatformDirs] | None = None,
    ) -> None:
        self._env = MappingProxyType(dict(env) if env is not None else dict(os.environ))
        self._app_name = app_name
        self._env_var = env_var
        self._dirs_factory = platform_dirs_factory or self._platform_dirs_for

    @staticmethod
    def _platform_dirs_for(app_name: str) -> PlatformDirs:
        return PlatformDirs(appname=app_name, appauthor=False, roaming=True)

    def data_dir(self) -> Path:
        override = self._env.get(self._env_var)
        if override:
            return Path(override).expanduser()
        return Path(self._dirs_factory(self._app_name).user_data_dir)

    def config_dir(self) -> Path:
        return Path(self._dirs_factory(self._app_name).user_config_dir)

    def config_path(self, filename: str = CONFIG_NAME) -> Path:
        return self.config_dir() / filename

    def cache_db_path(self) -> Path:
        return self.data_dir() / CACHE_DB_NAME

    def error_log_path(self) -> Path:
        return self.data_dir() / ERROR_LOG_NAME

    def log_dir(self) -> Path:
        return self.data_dir() / "logs"

    def ensure_data_dirs(self) -> None:
        """Create the data and log directories if they are missing."""

        self.log_dir().mkdir(parents=True, exist_ok=True)
        logger.debug("Data directory ready at %s", self.data_dir())


__all__ = ["AppPaths", "CACHE_DB_NAME", "CONFIG_NAME", "ERROR_LOG_NAME"]
