"""Failure taxonomy for enhancement jobs."""

from __future__ import annotations


class EnhancementError(RuntimeError):
    """Base class for failures that terminate a single enhancement job."""

    code = "enhancement_failed"


class TransferError(EnhancementError):
    """Input audio could not be fetched."""

    code = "transfer_failed"


class EngineError(EnhancementError):
    """The external DSP engine exited with a failure status."""

    code = "engine_failed"

    def __init__(self, message: str, *, diagnostic: str = "", returncode: int | None = None) -> None:
        super().__init__(f"{message}: {diagnostic}" if diagnostic else message)
        self.diagnostic = diagnostic
        self.returncode = returncode


class IntegrityError(EnhancementError):
    """An expected render artifact is missing, empty or undecodable."""

    code = "integrity_failed"


class MeasurementParseError(EnhancementError):
    """A measurement report could not be located or parsed."""

    code = "measurement_parse_failed"


class JobCancelledError(EnhancementError):
    """The service was shut down before the job reached a terminal state."""

    code = "cancelled"


class JobStateError(RuntimeError):
    """A job lifecycle invariant would be violated."""
