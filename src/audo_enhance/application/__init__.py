"""Application layer: ports, job store, classification log and job service."""

from .ports import DspEngine, EventPublisher, InputFetcher, NullEventPublisher

__all__ = ["DspEngine", "EventPublisher", "NullEventPublisher", "InputFetcher"]
