"""
Aggregate public API for core.pipeline.
Re-exports are intentional; keep them listed in __all__ to satisfy linters.
"""

from .error_log import ErrorLog
from .orchestrator import IndexingPipeline
from .reaper import reap_orphans
from .scheduler import IndexScheduler
from .types import EventSink, IndexPhase, RunContext, RunSummary, WatchSource

__all__ = [
    # Orchestrator
    "IndexingPipeline",
    "IndexScheduler",
    # Collaborators
    "ErrorLog",
    "reap_orphans",
    # Types
    "EventSink",
    "IndexPhase",
    "RunContext",
    "RunSummary",
    "WatchSource",
]
