"""Publish job lifecycle events as structured log records."""

from __future__ import annotations

import logging

from audo_enhance.domain.events import DomainEvent, JobFailed, JobStageStarted

LOGGER = logging.getLogger("audo_enhance.events")

# Anything not listed logs at INFO.
_EVENT_LEVELS: dict[type[DomainEvent], int] = {
    JobStageStarted: logging.DEBUG,
    JobFailed: logging.WARNING,
}


class LoggingEventPublisher:
    """Log each event on ``audo_enhance.events`` with its summary in ``extra``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def publish(self, event: DomainEvent) -> None:
        level = _EVENT_LEVELS.get(type(event), logging.INFO)
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            "job_event_emitted",
            extra={
                "event_name": type(event).__name__,
                "correlation_id": event.correlation_id,
                "payload_summary": dict(event.payload_summary),
                "occurred_at": event.occurred_at.isoformat(),
            },
        )
