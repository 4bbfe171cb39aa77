"""Pipeline layer - Batch conversion orchestration.

Owns the per-run state (``BatchJob``), the run settings, the progress
event bus, and the orchestrator that sequences sources through the
input, transcription and output layers.
"""

from .acquisition import (
    BatchSource,
    PendingSource,
    collect_sources,
    local_source,
    materialize,
    remote_source,
    source_name,
)
from .events import EventBus, EventKind, ProgressEvent
from .job import BatchJob, BatchState
from .orchestrator import BatchOrchestrator
from .settings import ConversionSettings

__all__ = [
    "BatchSource",
    "PendingSource",
    "collect_sources",
    "local_source",
    "materialize",
    "remote_source",
    "source_name",
    "EventBus",
    "EventKind",
    "ProgressEvent",
    "BatchJob",
    "BatchState",
    "BatchOrchestrator",
    "ConversionSettings",
]
