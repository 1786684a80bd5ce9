"""Watchdog-based tracking of the media files under one watch root."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from threading import Lock
from typing import Callable, Iterable, Literal, Mapping

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from core.scanner import DEFAULT_EXTENSIONS, iter_media_files
from utils.fs import is_hidden, resolve_path

FileEventType = Literal["created", "modified", "moved", "deleted"]

logger = logging.getLogger(__name__)


class _MediaEventHandler(FileSystemEventHandler):
    """Dispatch file system events to the owning watcher."""

    def __init__(self, watcher: "MediaWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:  # noqa: D401
        self._watcher.process_event(event, "created")

    def on_modified(self, event: FileSystemEvent) -> None:  # noqa: D401
        self._watcher.process_event(event, "modified")

    def on_moved(self, event: FileSystemEvent) -> None:  # noqa: D401
        self._watcher.process_event(event, "moved")

    def on_deleted(self, event: FileSystemEvent) -> None:  # noqa: D401
        self._watcher.process_event(event, "deleted")


class MediaWatcher:
    """Keep the set of media files under ``watch_root`` and a dirty flag.

    ``files`` maps absolute path strings to the last observed event type.
    ``dirty`` is raised on every relevant change and cleared by the pipeline.
    """

    def __init__(
        self,
        watch_root: str | Path,
        *,
        excluded: Iterable[str | Path] | None = None,
        extensions: Iterable[str] | None = None,
        observer_factory: Callable[[], Observer] | None = None,
    ) -> None:
        self._watch_path = resolve_path(watch_root)
        self._excluded = [resolve_path(path) for path in (excluded or [])]
        self._extensions = self._normalise_extensions(extensions)
        self._observer_factory = observer_factory or Observer
        self._files: dict[str, str] = {}
        self._dirty = False
        self._lock = Lock()
        self._observer: Observer | None = None

    @staticmethod
    def _normalise_extensions(extensions: Iterable[str] | None) -> set[str]:
        normalised: set[str] = set()
        for ext in extensions or DEFAULT_EXTENSIONS:
            candidate = ext.strip().lower()
            if not candidate:
                continue
            if not candidate.startswith("."):
                candidate = f".{candidate}"
            normalised.add(candidate)
        return normalised or set(DEFAULT_EXTENSIONS)

    @property
    def watch_path(self) -> Path:
        return self._watch_path

    @property
    def files(self) -> Mapping[str, str]:
        """Return a snapshot of the tracked paths."""
        with self._lock:
            return dict(self._files)

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._dirty

    @dirty.setter
    def dirty(self, value: bool) -> None:
        with self._lock:
            self._dirty = bool(value)

    def seed(self) -> int:
        """Populate ``files`` from a full scan of the watch root and mark dirty."""
        found = {
            str(path): "created"
            for path in iter_media_files(self._watch_path, excluded=self._excluded, extensions=self._extensions)
        }
        with self._lock:
            self._files = found
            self._dirty = True
        logger.info("Tracking %d file(s) under %s", len(found), self._watch_path)
        return len(found)

    def start(self) -> None:
        """Seed the file set and start the watchdog observer."""
        if self._observer is not None:
            return
        self.seed()
        if not self._watch_path.is_dir():
            logger.warning("Watch root %s is not a directory; not observing", self._watch_path)
            return
        observer = self._observer_factory()
        observer.schedule(_MediaEventHandler(self), str(self._watch_path), recursive=True)
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        try:
            observer.stop()
            observer.join()
        except Exception:  # pragma: no cover - watchdog defensive logging
            logger.warning("Failed to stop observer", exc_info=True)

    def remove(self, path: str) -> None:
        """Stop tracking ``path``; used when the pipeline finds it gone from disk."""
        with self._lock:
            self._files.pop(str(path), None)

    def process_event(self, event: FileSystemEvent, event_type: FileEventType) -> None:
        """Handle a watchdog event coming from the observer."""
        if event.is_directory:
            if event_type in ("deleted", "moved"):
                self._forget_tree(os.fsdecode(event.src_path))
                if event_type == "moved":
                    self._adopt_tree(os.fsdecode(event.dest_path))
            return
        src = os.fsdecode(event.src_path)
        if event_type == "deleted":
            self._forget(src)
        elif event_type == "moved":
            self._forget(src)
            self._track(os.fsdecode(event.dest_path), event_type)
        else:
            self._track(src, event_type)

    def _track(self, raw_path: str, event_type: FileEventType) -> None:
        path = Path(raw_path)
        if not self._should_track(path):
            return
        key = str(resolve_path(path))
        with self._lock:
            self._files[key] = event_type
            self._dirty = True

    def _forget(self, raw_path: str) -> None:
        key = str(resolve_path(raw_path))
        with self._lock:
            if self._files.pop(key, None) is not None:
                self._dirty = True

    def _forget_tree(self, raw_path: str) -> None:
        prefix = str(resolve_path(raw_path)) + os.sep
        with self._lock:
            stale = [key for key in self._files if key.startswith(prefix)]
            for key in stale:
                del self._files[key]
            if stale:
                self._dirty = True

    def _adopt_tree(self, raw_path: str) -> None:
        for path in iter_media_files(raw_path, excluded=self._excluded, extensions=self._extensions):
            self._track(str(path), "moved")

    def _should_track(self, path: Path) -> bool:
        resolved = resolve_path(path)
        try:
            relative = resolved.relative_to(self._watch_path)
        except ValueError:
            return False
        if any(is_hidden(Path(part)) for part in relative.parts):
            return False
        for excluded in self._excluded:
            try:
                resolved.relative_to(excluded)
                return False
            except ValueError:
                continue
        return resolved.suffix.lower() in self._extensions


__all__ = ["FileEventType", "MediaWatcher"]
