"""Timer-driven scheduling of indexing runs with a single-run busy guard."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from core.config import IndexerSettings
from db.cache import CacheStore, FileRecord
from index.writer import IndexWriter
from tags.reader import TagReader
from utils.env import is_headless

from .error_log import ErrorLog
from .orchestrator import IndexingPipeline
from .types import EventSink, IndexPhase, RunSummary, WatchSource

if is_headless():

    class QObject:  # type: ignore[too-many-ancestors]
        """Simple QObject replacement when Qt is unavailable."""

        def __init__(self, *args, **kwargs) -> None:  # noqa: D401 - Qt-compatible signature
            pass

        def deleteLater(self) -> None:  # noqa: D401 - Qt-compatible signature
            pass

    class _Signal:
        def __init__(self) -> None:
            self._callbacks: list[Callable[..., None]] = []

        def connect(self, callback: Callable[..., None]) -> None:
            self._callbacks.append(callback)

        def disconnect(self, callback: Callable[..., None]) -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        def emit(self, *args, **kwargs) -> None:
            for callback in list(self._callbacks):
                callback(*args, **kwargs)

    class _SignalDescriptor:
        def __init__(self) -> None:
            self._name: str | None = None

        def __set_name__(self, owner: type, name: str) -> None:
            self._name = name

        def __get__(self, instance: object | None, owner: type) -> _Signal:
            if instance is None:
                raise AttributeError("Signal descriptors are only available on instances")
            if self._name is None:
                raise AttributeError("Signal descriptor not initialised")
            signal = instance.__dict__.get(self._name)
            if signal is None:
                signal = _Signal()
                instance.__dict__[self._name] = signal
            return signal

    def pyqtSignal(*_args, **_kwargs) -> _SignalDescriptor:  # noqa: D401 - Qt-compatible signature
        return _SignalDescriptor()

    class QTimer:
        """Repeating timer backed by :class:`threading.Timer`."""

        def __init__(self, parent: QObject | None = None) -> None:
            self._interval = 0
            self._active = False
            self._timer: threading.Timer | None = None
            self._lock = threading.Lock()
            self.timeout = _Signal()

        def setInterval(self, interval: int) -> None:
            self._interval = int(interval)

        def isActive(self) -> bool:
            return self._active

        def start(self) -> None:
            with self._lock:
                self._active = True
                self._schedule()

        def stop(self) -> None:
            with self._lock:
                self._active = False
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None

        def _schedule(self) -> None:
            timer = threading.Timer(max(self._interval, 1) / 1000.0, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

        def _fire(self) -> None:
            if not self._active:
                return
            try:
                self.timeout.emit()
            finally:
                with self._lock:
                    if self._active:
                        self._schedule()


else:  # pragma: no branch - trivial import guard
    from PyQt6.QtCore import QObject, QTimer, pyqtSignal

logger = logging.getLogger(__name__)

Runner = Callable[[Callable[[], None]], None]


def _start_thread(target: Callable[[], None]) -> None:
    thread = threading.Thread(target=target, name="mystream-indexer", daemon=True)
    thread.start()


class IndexScheduler(QObject):
    """Poll the watcher's dirty flag and run the pipeline when it is set.

    Ticks arriving while a run is active are no-ops. Runs are handed to
    ``runner`` (a new thread by default) so the tick never blocks.
    """

    progress = pyqtSignal(int, str)
    indexing_started = pyqtSignal()
    indexing_finished = pyqtSignal(object)
    status_changed = pyqtSignal(str)

    def __init__(
        self,
        *,
        watcher: WatchSource,
        store: CacheStore,
        error_log: ErrorLog,
        settings: IndexerSettings | None = None,
        reader: TagReader | None = None,
        writer: IndexWriter | None = None,
        runner: Runner | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or IndexerSettings()
        self._watcher = watcher
        self._store = store
        self._error_log = error_log
        if writer is None:
            output_dir = Path(watcher.watch_path) / self._settings.output_dirname
            writer = IndexWriter(
                output_dir,
                index_filename=self._settings.index_filename,
                status_filename=self._settings.status_filename,
            )
        self._pipeline = IndexingPipeline(
            watcher=watcher,
            store=store,
            writer=writer,
            error_log=error_log,
            reader=reader,
            events=EventSink(progress_cb=self.progress.emit, status_cb=self.status_changed.emit),
        )
        self._runner = runner or _start_thread
        self._busy = threading.Lock()
        self._timer: QTimer | None = None
        self._last_summary: RunSummary | None = None

    @property
    def phase(self) -> IndexPhase:
        return self._pipeline.phase

    @property
    def last_summary(self) -> RunSummary | None:
        return self._last_summary

    @property
    def writer(self) -> IndexWriter:
        return self._pipeline.writer

    def is_busy(self) -> bool:
        return self._busy.locked()

    def start(self) -> None:
        """Load the cache and begin ticking every ``tick_interval_ms``."""

        if not self._store.is_loaded:
            self._store.load()
        if self._timer is None:
            self._timer = QTimer(self)
            self._timer.setInterval(self._settings.tick_interval_ms)
            self._timer.timeout.connect(self.tick)
        self._timer.start()
        logger.info("Index scheduler started (tick=%dms)", self._settings.tick_interval_ms)

    def dispose(self) -> None:
        """Stop ticking and wait for a run already in progress to finish.

        Callers may close the cache store once this returns.
        """

        if self._timer is not None:
            self._timer.stop()
        if self._busy.locked():
            logger.info("Waiting for the active indexing run to finish")
        with self._busy:
            pass
        logger.info("Index scheduler stopped")

    def tick(self) -> bool:
        """Start a run if the watcher is dirty and none is active; return whether one started."""

        if not self._watcher.dirty:
            return False
        if not self._busy.acquire(blocking=False):
            return False
        try:
            self._runner(self._run_guarded)
        except Exception:
            self._busy.release()
            raise
        return True

    def run_now(self) -> RunSummary | None:
        """Run synchronously in the calling thread unless a run is already active."""

        if not self._busy.acquire(blocking=False):
            return None
        self._run_guarded()
        return self._last_summary

    def _run_guarded(self) -> None:
        summary = RunSummary(errors_occurred=True)
        try:
            self._safe_emit(self.indexing_started)
            summary = self._pipeline.run()
        except Exception:
            logger.exception("Indexing run aborted")
        finally:
            self._last_summary = summary
            self._busy.release()
            self._safe_emit(self.indexing_finished, summary)

    @staticmethod
    def _safe_emit(signal, *args) -> None:
        try:
            signal.emit(*args)
        except Exception:
            logger.exception("Listener raised while handling a scheduler event")

    def wipe(self) -> bool:
        """Delete the index artifacts and empty the cache; refused while a run is active."""

        if not self._busy.acquire(blocking=False):
            logger.warning("Wipe requested while indexing; ignoring")
            return False
        try:
            removed = self.writer.wipe()
            self._store.clear()
            self._store.persist()
            logger.info("Wiped index state (%d artifact(s) removed)", len(removed))
        finally:
            self._busy.release()
        self._safe_emit(self.status_changed, "Index wiped")
        return True

    def list_files(self) -> list[FileRecord]:
        """Return every cached record, ordered by path."""

        return self._store.all_records()


__all__ = ["IndexScheduler"]
