from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class IndexPhase(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    FINALIZING = "finalizing"


@runtime_checkable
class WatchSource(Protocol):
    """What the pipeline needs from the filesystem watcher."""

    dirty: bool

    @property
    def files(self) -> Mapping[str, object]: ...

    @property
    def watch_path(self) -> Path: ...

    def remove(self, path: str) -> None: ...


@dataclass
class RunContext:
    """Mutable state of a single pipeline run."""

    paths: list[str]
    total: int = 0
    processed: int = 0
    read: int = 0
    skipped: int = 0
    missing: int = 0
    failed: int = 0
    errors_occurred: bool = False

    def __post_init__(self) -> None:
        self.total = len(self.paths)


@dataclass
class RunSummary:
    total: int = 0
    read: int = 0
    skipped: int = 0
    missing: int = 0
    failed: int = 0
    rebuilt: bool = False
    indexed: int = 0
    reaped: list[str] = field(default_factory=list)
    index_date: int | None = None
    errors_occurred: bool = False

    @classmethod
    def from_context(cls, ctx: RunContext) -> "RunSummary":
        return cls(
            total=ctx.total,
            read=ctx.read,
            skipped=ctx.skipped,
            missing=ctx.missing,
            failed=ctx.failed,
            errors_occurred=ctx.errors_occurred,
        )


class EventSink:
    """Forward pipeline events to optional listeners, isolating their failures."""

    def __init__(
        self,
        *,
        progress_cb: Callable[[int, str], None] | None = None,
        status_cb: Callable[[str], None] | None = None,
    ) -> None:
        self._progress_cb = progress_cb
        self._status_cb = status_cb

    def progress(self, percent: int, label: str) -> None:
        if self._progress_cb is None:
            return
        try:
            self._progress_cb(percent, label)
        except Exception:
            logger.exception("Progress listener raised; disabling further updates.")
            self._progress_cb = None

    def status(self, text: str) -> None:
        if self._status_cb is None:
            return
        try:
            self._status_cb(text)
        except Exception:
            logger.exception("Status listener raised; disabling further updates.")
            self._status_cb = None


__all__ = ["EventSink", "IndexPhase", "RunContext", "RunSummary", "WatchSource"]
