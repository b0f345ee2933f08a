"""Domain models for enhancement requests and jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from audo_enhance.enhancement_options import EnhancementType, Focus, MasterProfile

if TYPE_CHECKING:
    from audo_enhance.analysis import AnalysisResult
    from audo_enhance.measurement import LoudnessMeasurement
    from audo_enhance.output_metrics import OutputMetrics
    from audo_enhance.synthesis import RenderPlan


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class JobStatus(str, Enum):
    """Job lifecycle states."""

    QUEUED = "queued"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.FAILED)


@dataclass(frozen=True, slots=True)
class EnhancementRequest:
    """Validated input parameters for an enhancement job."""

    input_file_url: str
    enhancement_type: EnhancementType
    speed_multiplier: float = 1.0
    pitch_semitones: float = 0.0
    focus: Focus = Focus.NONE
    master_profile: MasterProfile = MasterProfile.STREAMING

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputFileUrl": self.input_file_url,
            "enhancementType": self.enhancement_type.value,
            "speedMultiplier": self.speed_multiplier,
            "pitchSemitones": self.pitch_semitones,
            "focus": self.focus.value,
            "masterProfile": self.master_profile.value,
        }


@dataclass(slots=True)
class Job:
    """Mutable job record; mutated only through the job store's writer."""

    job_id: str
    request: EnhancementRequest
    status: JobStatus = JobStatus.QUEUED
    step: str = "Queued"
    analysis: AnalysisResult | None = None
    render_plan: RenderPlan | None = None
    loudness_measurement: LoudnessMeasurement | None = None
    output_path: Path | None = None
    enhanced_file_url: str | None = None
    output_metrics: OutputMetrics | None = None
    error: str | None = None
    created_at: datetime = field(default_factory=utc_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    failed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class JobSnapshot:
    """Read-only copy of a job handed to observers."""

    job_id: str
    request: EnhancementRequest
    status: JobStatus
    step: str
    analysis: AnalysisResult | None
    render_plan: RenderPlan | None
    loudness_measurement: LoudnessMeasurement | None
    output_path: Path | None
    enhanced_file_url: str | None
    output_metrics: OutputMetrics | None
    error: str | None
    created_at: datetime
    started_at: datetime | None
    finished_at: datetime | None
    failed_at: datetime | None

    @classmethod
    def of(cls, job: Job) -> JobSnapshot:
        return cls(
            job_id=job.job_id,
            request=job.request,
            status=job.status,
            step=job.step,
            analysis=job.analysis,
            render_plan=job.render_plan,
            loudness_measurement=job.loudness_measurement,
            output_path=job.output_path,
            enhanced_file_url=job.enhanced_file_url,
            output_metrics=job.output_metrics,
            error=job.error,
            created_at=job.created_at,
            started_at=job.started_at,
            finished_at=job.finished_at,
            failed_at=job.failed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "jobId": self.job_id,
            "status": self.status.value,
            "step": self.step,
            "request": self.request.to_dict(),
            "analysis": self.analysis.to_dict() if self.analysis is not None else None,
            "renderPlan": self.render_plan.to_dict() if self.render_plan is not None else None,
            "loudnessMeasurement": (
                self.loudness_measurement.to_dict() if self.loudness_measurement is not None else None
            ),
            "enhancedFileUrl": self.enhanced_file_url,
            "outputMetrics": self.output_metrics.to_dict() if self.output_metrics is not None else None,
            "error": self.error,
            "createdAt": _isoformat(self.created_at),
            "startedAt": _isoformat(self.started_at),
            "finishedAt": _isoformat(self.finished_at),
            "failedAt": _isoformat(self.failed_at),
        }
