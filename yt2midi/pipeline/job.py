"""Batch job state."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..core import ConversionResult, ItemError
from .acquisition import BatchSource


class BatchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchState.COMPLETED, BatchState.CANCELLED, BatchState.FAILED)


@dataclass
class BatchJob:
    """State owned by the orchestrator for one conversion run.

    ``results`` and ``errors`` are append-only; together they never hold
    more entries than ``sources``. ``cancel()`` may be called from any
    thread, even before the run starts, and is honoured before the next item
    starts.
    """

    sources: List[BatchSource] = field(default_factory=list)
    results: List[ConversionResult] = field(default_factory=list)
    errors: List[ItemError] = field(default_factory=list)
    cursor: int = 0
    state: BatchState = BatchState.IDLE
    failure: Optional[ItemError] = None
    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Ask the batch to stop at the next item boundary."""
        self._cancel_event.set()

    def clear_cancel(self) -> None:
        self._cancel_event.clear()

    def reset(self) -> None:
        """Clear outcomes ahead of a new run. A pending cancel is kept."""
        self.results = []
        self.errors = []
        self.cursor = 0
        self.failure = None
        self.state = BatchState.IDLE

    @property
    def total(self) -> int:
        return len(self.sources)

    @property
    def processed(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def progress(self) -> float:
        """Fraction of sources attempted."""
        return self.processed / self.total if self.total else 0.0

    @property
    def succeeded(self) -> bool:
        """Batch-level success: finished without a batch failure."""
        return self.state == BatchState.COMPLETED

    def summary(self) -> str:
        if self.state == BatchState.FAILED:
            return f"Batch failed: {self.failure.message if self.failure else 'unknown error'}"
        if not self.results:
            return "No files were successfully converted."
        text = f"Processed {len(self.results)} of {self.total} file(s)"
        if self.errors:
            text += f", {len(self.errors)} failed"
        if self.state == BatchState.CANCELLED:
            text += " (cancelled)"
        return text + "."
