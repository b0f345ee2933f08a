"""DDD domain layer."""

from .errors import (
    EngineError,
    EnhancementError,
    IntegrityError,
    JobCancelledError,
    JobStateError,
    MeasurementParseError,
    TransferError,
)
from .events import (
    ClassificationEvent,
    ClassificationEventType,
    DomainEvent,
    JobCompleted,
    JobFailed,
    JobQueued,
    JobStageStarted,
)
from .models import EnhancementRequest, Job, JobSnapshot, JobStatus
from .policies import MASTER_TARGETS, MIX_SAFETY_TARGET, STREAMING_TARGET, LoudnessTarget, resolve_master_target

__all__ = [
    "EnhancementError",
    "TransferError",
    "EngineError",
    "IntegrityError",
    "MeasurementParseError",
    "JobCancelledError",
    "JobStateError",
    "DomainEvent",
    "JobQueued",
    "JobStageStarted",
    "JobCompleted",
    "JobFailed",
    "ClassificationEvent",
    "ClassificationEventType",
    "EnhancementRequest",
    "Job",
    "JobSnapshot",
    "JobStatus",
    "LoudnessTarget",
    "STREAMING_TARGET",
    "MASTER_TARGETS",
    "MIX_SAFETY_TARGET",
    "resolve_master_target",
]
