"""Run the indexer against one watch root from the command line."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Sequence

# The command line never drives a Qt event loop.
os.environ.setdefault("MSI_HEADLESS", "1")

from core.config import IndexerSettings, load_settings  # noqa: E402
from core.pipeline import ErrorLog, IndexScheduler  # noqa: E402
from core.watcher import MediaWatcher  # noqa: E402
from db.cache import CacheStore  # noqa: E402
from utils.paths import ensure_dirs, get_cache_db_path, get_error_log_path, get_log_dir  # noqa: E402

logger = logging.getLogger(__name__)


def _resolve_log_level(value: str | None) -> int:
    if not value:
        return logging.INFO
    level = logging.getLevelName(value.upper())
    if isinstance(level, int):
        return level
    return logging.INFO


def setup_logging() -> None:
    """Configure logging to stdout and a rotating application log file."""

    level = _resolve_log_level(os.environ.get("MSI_LOG_LEVEL"))
    root_logger = logging.getLogger()

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # pragma: no cover - best effort cleanup
            pass

    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)


def build_scheduler(settings: IndexerSettings, watcher: MediaWatcher, store: CacheStore) -> IndexScheduler:
    scheduler = IndexScheduler(
        watcher=watcher,
        store=store,
        error_log=ErrorLog(get_error_log_path()),
        settings=settings,
    )
    scheduler.progress.connect(lambda percent, label: logger.info("%d%% : %s", percent, label))
    scheduler.status_changed.connect(lambda text: logger.info("Status: %s", text))
    return scheduler


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="mystream-indexer", description=__doc__)
    ap.add_argument("--root", help="watch root (overrides watch_root in config.yaml)")
    ap.add_argument("--once", action="store_true", help="index once and exit")
    ap.add_argument("--wipe", action="store_true", help="delete index, status marker and cache, then exit")
    ap.add_argument("--list", action="store_true", help="print cached records and exit")
    return ap.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    ensure_dirs()
    setup_logging()

    settings = load_settings()
    if args.root:
        settings = settings.model_copy(update={"watch_root": str(Path(args.root).expanduser())})
    if not settings.watch_root:
        logger.error("No watch root configured; pass --root or set watch_root in config.yaml")
        return 2

    watcher = MediaWatcher(settings.watch_root, excluded=settings.excluded, extensions=settings.allow_exts)
    store = CacheStore(get_cache_db_path())
    if store.load():
        logger.warning("Cache was unreadable and has been reset; every file will be re-read")
    try:
        return _dispatch(args, watcher, build_scheduler(settings, watcher, store))
    finally:
        store.close()


def _dispatch(args: argparse.Namespace, watcher: MediaWatcher, scheduler: IndexScheduler) -> int:
    if args.wipe:
        return 0 if scheduler.wipe() else 1
    if args.list:
        for record in scheduler.list_files():
            state = "valid" if record.is_valid else ("untagged" if record.tag_data is None else "invalid")
            print(f"{state:8} {record.path}")
        return 0
    if args.once:
        watcher.seed()
        summary = scheduler.run_now()
        return 1 if summary is None or summary.errors_occurred else 0

    watcher.start()
    scheduler.start()
    try:
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        scheduler.dispose()
        watcher.stop()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
