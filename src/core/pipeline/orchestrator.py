"""Incremental indexing pipeline: scan the watcher's files, then rebuild the index."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from db.cache import CacheStore, FileRecord
from index.writer import IndexDocument, IndexEntry, IndexWriter, now_millis
from tags.base import MissingFile, ReadFailure, ReadOutcome, TagData, TagFailure, TagOk
from tags.reader import TagReader, describe_error
from tags.validator import is_tag_valid
from utils.fs import clip_path, mtime_token

from .error_log import ErrorLog
from .reaper import reap_orphans
from .types import EventSink, IndexPhase, RunContext, RunSummary, WatchSource

logger = logging.getLogger(__name__)

TAG_READ_FAIL = "tag read fail"
UNREADABLE = "could not be read, is it properly tagged?"
NO_TAG_DATA = "has no tag data"
NOT_PROPERLY_TAGGED = "isn't properly tagged"


class IndexingPipeline:
    """Run one scan-and-finalise cycle over the watcher's current file set.

    The pipeline holds no busy guard of its own; :class:`IndexScheduler`
    ensures a single active run.
    """

    def __init__(
        self,
        *,
        watcher: WatchSource,
        store: CacheStore,
        writer: IndexWriter,
        error_log: ErrorLog,
        reader: TagReader | None = None,
        events: EventSink | None = None,
    ) -> None:
        self._watcher = watcher
        self._store = store
        self._writer = writer
        self._error_log = error_log
        self._reader = reader or TagReader()
        self._events = events or EventSink()
        self.phase = IndexPhase.IDLE

    @property
    def writer(self) -> IndexWriter:
        return self._writer

    def run(self) -> RunSummary:
        """Process every tracked path, then rebuild the index if anything changed.

        Always returns to :attr:`IndexPhase.IDLE`, even if finalisation raised.
        """
        start = time.perf_counter()
        self._watcher.dirty = False
        self._error_log.reset()
        ctx = RunContext(paths=list(self._watcher.files.keys()))
        summary = RunSummary.from_context(ctx)
        self.phase = IndexPhase.SCANNING
        logger.info("Indexing started: %d tracked file(s)", ctx.total)
        self._events.status(f"Scanning {ctx.total} file(s)")
        try:
            for index, path in enumerate(ctx.paths):
                self._process_path(ctx, index, path)
                ctx.processed = index + 1
            self.phase = IndexPhase.FINALIZING
            summary = self._finalize(ctx)
        except Exception:
            logger.exception("Indexing run failed during finalisation")
            summary = RunSummary.from_context(ctx)
            summary.errors_occurred = True
        finally:
            self.phase = IndexPhase.IDLE

        elapsed = time.perf_counter() - start
        logger.info(
            "Indexing complete: total=%d, read=%d, skipped=%d, missing=%d, failed=%d, rebuilt=%s (%.2fs)",
            summary.total,
            summary.read,
            summary.skipped,
            summary.missing,
            summary.failed,
            summary.rebuilt,
            elapsed,
        )
        if summary.errors_occurred:
            self._events.status(f"Indexing finished with errors, see {self._error_log.path}")
        else:
            self._events.status("Indexing complete")
        return summary

    # ---- Scanning -------------------------------------------------------------------

    def _process_path(self, ctx: RunContext, index: int, path: str) -> None:
        """Skip, read or drop one tracked path and record the outcome.

        The skip applies only to records that carry tag data. A record whose
        previous read failed is re-read on every run even with an unchanged
        mtime, so a file whose tags get fixed in place is picked up; the cost
        is one extra read per failing file per run.
        """
        record: FileRecord | None = None
        current_mtime: str | None = None
        outcome: ReadOutcome
        try:
            if not Path(path).exists():
                outcome = MissingFile(path=path)
            else:
                current_mtime = mtime_token(path)
                record = self._store.get(path)
                if record is not None and record.tag_data is not None and record.mtime == current_mtime:
                    ctx.skipped += 1
                    logger.debug("Unchanged since last run: %s", path)
                    return
                outcome = self._reader.read(path)
        except Exception as exc:
            outcome = ReadFailure(path=path, detail=describe_error(exc))
        try:
            self._record_outcome(ctx, index, path, outcome, record, current_mtime)
        except Exception:
            logger.exception("Failed to cache result for %s", path)
            ctx.failed += 1
            ctx.errors_occurred = True

    def _record_outcome(
        self,
        ctx: RunContext,
        index: int,
        path: str,
        outcome: ReadOutcome,
        record: FileRecord | None,
        current_mtime: str | None,
    ) -> None:
        if isinstance(outcome, MissingFile):
            logger.info("Tracked file vanished, dropping from watcher: %s", path)
            self._watcher.remove(path)
            ctx.missing += 1
            return

        if record is None:
            record = FileRecord(path=path)

        if isinstance(outcome, TagOk):
            tags = outcome.tags
            record.tag_data = TagData(
                name=tags.title,
                album=tags.album,
                track=tags.track,
                artist=tags.artist,
                clipped_path=clip_path(path, self._watcher.watch_path),
            )
            record.mtime = current_mtime
            record.dirty = True
            record.is_valid = is_tag_valid(record.tag_data)
            self._store.upsert(record)
            ctx.read += 1
            percent = (index * 100) // ctx.total if ctx.total else 100
            self._events.progress(percent, f"{tags.title} - {tags.artist}")
            return

        record.tag_data = None
        record.is_valid = False
        record.dirty = False
        record.mtime = current_mtime
        self._store.upsert(record)
        if isinstance(outcome, TagFailure):
            self._error_log.write(path, f"{TAG_READ_FAIL} ({outcome.detail})")
        else:
            self._error_log.write(path, f"{UNREADABLE} ({outcome.detail})")
        ctx.failed += 1
        ctx.errors_occurred = True

    # ---- Finalizing -----------------------------------------------------------------

    def _finalize(self, ctx: RunContext) -> RunSummary:
        summary = RunSummary.from_context(ctx)
        self._store.persist()

        dirty = self._store.dirty_records()
        current_paths = list(self._watcher.files.keys())
        tracked = set(current_paths)
        has_orphans = any(record.path not in tracked for record in self._store.all_records())
        if not dirty and not has_orphans:
            logger.info("No changed files; index left as is")
            return summary

        self._events.status("Writing index")
        entries: list[IndexEntry] = []
        for path in current_paths:
            record = self._store.get(path)
            if record is None:
                continue
            tag_data = record.tag_data
            if tag_data is None:
                self._error_log.write(path, NO_TAG_DATA)
                continue
            if not is_tag_valid(tag_data):
                self._error_log.write(tag_data.clipped_path or path, NOT_PROPERLY_TAGGED)
                summary.errors_occurred = True
                continue
            entries.append(
                IndexEntry(
                    album=str(tag_data.album),
                    artist=str(tag_data.artist),
                    name=str(tag_data.name),
                    path=tag_data.clipped_path,
                )
            )

        document = IndexDocument(entries=entries, date=now_millis())
        self._writer.write(document)

        self._store.clear_dirty(record.path for record in dirty)
        summary.reaped = reap_orphans(self._store, current_paths)
        self._store.persist()

        summary.rebuilt = True
        summary.indexed = len(entries)
        summary.index_date = document.date
        return summary


__all__ = [
    "IndexingPipeline",
    "NOT_PROPERLY_TAGGED",
    "NO_TAG_DATA",
    "TAG_READ_FAIL",
    "UNREADABLE",
]
