"""Bounded in-memory log of classification events with a durable sink."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Protocol

from audo_enhance.domain.events import ClassificationEvent

logger = logging.getLogger(__name__)

DEFAULT_RING_CAPACITY = 500


class ClassificationSink(Protocol):
    """Port for durable, append-only storage of classification events."""

    def append(self, event: ClassificationEvent) -> None:
        """Persist a single event."""


class ClassificationEventLog:
    """Keep the most recent events in memory and forward each one to a sink.

    Sink failures never propagate: the event stays in the ring and a warning is
    logged.
    """

    def __init__(self, capacity: int = DEFAULT_RING_CAPACITY, sink: ClassificationSink | None = None) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive.")
        self._events: deque[ClassificationEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._sink = sink

    @property
    def capacity(self) -> int:
        return self._events.maxlen or 0

    def record(self, event: ClassificationEvent) -> None:
        with self._lock:
            self._events.append(event)

        if self._sink is None:
            return
        try:
            self._sink.append(event)
        except Exception as error:  # noqa: BLE001
            logger.warning(
                "Failed to persist classification event",
                extra={"event_id": event.event_id, "job_id": event.job_id, "event_type": event.event_type.value},
                exc_info=error,
            )

    def recent(self, limit: int | None = None) -> list[ClassificationEvent]:
        """Return up to ``limit`` newest events, oldest first."""

        with self._lock:
            events = list(self._events)
        if limit is None:
            return events
        if limit <= 0:
            return []
        return events[-limit:]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
