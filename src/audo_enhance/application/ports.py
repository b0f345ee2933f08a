"""Ports the job pipeline drives: DSP engine, input fetcher and event publisher.

Infrastructure adapters implement these; tests substitute in-memory fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence

from audo_enhance.domain.events import DomainEvent
from audo_enhance.filtergraph import FilterOp


class DspEngine(Protocol):
    """External audio engine.

    Every call is synchronous and independent; implementations raise
    :class:`~audo_enhance.domain.errors.EngineError` on engine failure.
    """

    def decode(self, source: Path, destination: Path, *, sample_rate_hz: int, channel_count: int) -> None:
        """Decode ``source`` into the canonical stream format at ``destination``."""

    def render(self, source: Path, destination: Path, ops: Sequence[FilterOp]) -> None:
        """Render ``source`` through ``ops`` into ``destination``."""

    def measure(self, source: Path, ops: Sequence[FilterOp]) -> str:
        """Run ``ops`` in measure-only mode and return the engine's text output."""


class InputFetcher(Protocol):
    def fetch(self, url: str, destination: Path) -> Path:
        """Write the resource at ``url`` to ``destination`` and return the written path.

        Raises :class:`~audo_enhance.domain.errors.TransferError` when the
        resource cannot be retrieved.
        """


class EventPublisher(Protocol):
    def publish(self, event: DomainEvent) -> None:
        """Publish one job lifecycle event; must not raise into the pipeline."""


class NullEventPublisher:
    """Drops every lifecycle event."""

    def publish(self, event: DomainEvent) -> None:  # noqa: ARG002
        return
