"""Progress event bus.

The orchestrator publishes an ordered stream of events; delivery layers
(the CLI, tests) subscribe to it instead of passing progress callbacks
through every pipeline stage.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class EventKind(Enum):
    BATCH_STARTED = "batch_started"
    ITEM_STARTED = "item_started"
    STAGE = "stage"
    ITEM_COMPLETED = "item_completed"
    ITEM_FAILED = "item_failed"
    BATCH_FINISHED = "batch_finished"
    LOG = "log"


@dataclass(frozen=True)
class ProgressEvent:
    """One progress or log message."""

    kind: EventKind
    message: str
    index: Optional[int] = None  # 0-based item index
    total: Optional[int] = None
    source_name: Optional[str] = None
    level: int = logging.INFO

    @property
    def progress(self) -> Optional[float]:
        """Completed fraction implied by this event, if known."""
        if self.index is None or not self.total:
            return None
        done = self.index + 1 if self.kind in (
            EventKind.ITEM_COMPLETED, EventKind.ITEM_FAILED
        ) else self.index
        return done / self.total


Subscriber = Callable[[ProgressEvent], None]


class EventBus:
    """Ordered fan-out of progress events."""

    def __init__(self, keep_history: bool = True):
        self._subscribers: List[Subscriber] = []
        self.keep_history = keep_history
        self.history: List[ProgressEvent] = []

    def subscribe(self, callback: Subscriber) -> Subscriber:
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, event: ProgressEvent) -> None:
        """Record the event and hand it to every subscriber in order.

        A subscriber that raises is logged and skipped; the remaining
        subscribers still receive the event.
        """
        if self.keep_history:
            self.history.append(event)
        logger.debug("%s: %s", event.kind.value, event.message)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Progress subscriber failed on %s event", event.kind.value)

    def emit(self, kind: EventKind, message: str, **kwargs) -> ProgressEvent:
        """Build and publish an event."""
        event = ProgressEvent(kind=kind, message=message, **kwargs)
        self.publish(event)
        return event

    def of_kind(self, kind: EventKind) -> List[ProgressEvent]:
        return [e for e in self.history if e.kind == kind]
