"""Domain event contracts for enhancement workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from audo_enhance.enhancement_options import FeedbackRating, FeedbackReason

if TYPE_CHECKING:
    from audo_enhance.analysis import AnalysisResult
    from audo_enhance.domain.models import EnhancementRequest
    from audo_enhance.output_metrics import OutputMetrics
    from audo_enhance.synthesis import RenderPlan


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Base lifecycle event emitted by application services."""

    correlation_id: str
    payload_summary: dict[str, Any]
    occurred_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True, slots=True)
class JobQueued(DomainEvent):
    """A validated request was accepted and a job was created."""


@dataclass(frozen=True, slots=True)
class JobStageStarted(DomainEvent):
    """A job entered a new pipeline stage."""


@dataclass(frozen=True, slots=True)
class JobCompleted(DomainEvent):
    """A job rendered and verified its output."""


@dataclass(frozen=True, slots=True)
class JobFailed(DomainEvent):
    """A job stage raised and the job was marked failed."""


class ClassificationEventType(str, Enum):
    """Kinds of outcome records kept for offline analysis."""

    RENDER_COMPLETED = "render_completed"
    RENDER_FAILED = "render_failed"
    FEEDBACK = "feedback"


@dataclass(frozen=True, slots=True)
class ClassificationEvent:
    """Immutable outcome or feedback record for one job."""

    event_type: ClassificationEventType
    job_id: str
    request: EnhancementRequest | None = None
    analysis: AnalysisResult | None = None
    render_plan: RenderPlan | None = None
    output_metrics: OutputMetrics | None = None
    error: str | None = None
    rating: FeedbackRating | None = None
    reason: FeedbackReason | None = None
    notes: str | None = None
    user_id: str | None = None
    event_id: str = field(default_factory=lambda: uuid4().hex)
    occurred_at: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "eventId": self.event_id,
            "eventType": self.event_type.value,
            "jobId": self.job_id,
            "occurredAt": self.occurred_at.isoformat(),
            "request": self.request.to_dict() if self.request is not None else None,
            "analysis": self.analysis.to_dict() if self.analysis is not None else None,
            "renderPlan": self.render_plan.to_dict() if self.render_plan is not None else None,
        }
        if self.event_type is ClassificationEventType.RENDER_COMPLETED:
            payload["outputMetrics"] = self.output_metrics.to_dict() if self.output_metrics is not None else None
        elif self.event_type is ClassificationEventType.RENDER_FAILED:
            payload["error"] = self.error
        else:
            payload.update(
                {
                    "rating": self.rating.value if self.rating is not None else None,
                    "reason": self.reason.value if self.reason is not None else None,
                    "notes": self.notes,
                    "userId": self.user_id,
                }
            )
        return payload
