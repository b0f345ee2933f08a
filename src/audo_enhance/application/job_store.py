"""In-memory job registry with a single writer and snapshot reads."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

from audo_enhance.domain.errors import JobStateError
from audo_enhance.domain.models import EnhancementRequest, Job, JobSnapshot, JobStatus, utc_now

if TYPE_CHECKING:
    from audo_enhance.analysis import AnalysisResult
    from audo_enhance.measurement import LoudnessMeasurement
    from audo_enhance.output_metrics import OutputMetrics
    from audo_enhance.synthesis import RenderPlan

_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.DONE, JobStatus.FAILED}),
    JobStatus.DONE: frozenset(),
    JobStatus.FAILED: frozenset(),
}


class JobStore:
    """Thread-safe job registry.

    Readers get immutable :class:`JobSnapshot` copies. Mutation goes through the
    :class:`JobWriter` returned by :meth:`claim_writer`, which can be claimed once.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()
        self._writer: JobWriter | None = None

    def claim_writer(self) -> JobWriter:
        with self._lock:
            if self._writer is not None:
                raise JobStateError("The job store writer has already been claimed.")
            self._writer = JobWriter(self)
            return self._writer

    def snapshot(self, job_id: str) -> JobSnapshot | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return JobSnapshot.of(job) if job is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs


class JobWriter:
    """Sole mutation capability for a :class:`JobStore`."""

    def __init__(self, store: JobStore) -> None:
        self._store = store

    def create(self, request: EnhancementRequest) -> JobSnapshot:
        job = Job(job_id=uuid4().hex, request=request)
        with self._store._lock:
            self._store._jobs[job.job_id] = job
            return JobSnapshot.of(job)

    def _require(self, job_id: str) -> Job:
        try:
            return self._store._jobs[job_id]
        except KeyError as exc:
            raise JobStateError(f"Unknown job '{job_id}'.") from exc

    @staticmethod
    def _transition(job: Job, target: JobStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[job.status]:
            raise JobStateError(f"Job '{job.job_id}' cannot move from {job.status.value} to {target.value}.")
        job.status = target

    def mark_processing(self, job_id: str) -> None:
        with self._store._lock:
            job = self._require(job_id)
            self._transition(job, JobStatus.PROCESSING)
            job.started_at = utc_now()

    def set_step(self, job_id: str, step: str) -> None:
        with self._store._lock:
            job = self._require(job_id)
            if job.status.is_terminal:
                raise JobStateError(f"Job '{job_id}' is {job.status.value}; its step is frozen.")
            job.step = step

    def _write_once(self, job_id: str, attribute: str, value: object) -> None:
        with self._store._lock:
            job = self._require(job_id)
            if getattr(job, attribute) is not None:
                raise JobStateError(f"Job '{job_id}' already has a recorded {attribute}.")
            setattr(job, attribute, value)

    def record_analysis(self, job_id: str, analysis: AnalysisResult) -> None:
        self._write_once(job_id, "analysis", analysis)

    def record_render_plan(self, job_id: str, render_plan: RenderPlan) -> None:
        self._write_once(job_id, "render_plan", render_plan)

    def record_loudness(self, job_id: str, measurement: LoudnessMeasurement) -> None:
        self._write_once(job_id, "loudness_measurement", measurement)

    def mark_done(
        self,
        job_id: str,
        output_path: Path,
        enhanced_file_url: str,
        output_metrics: OutputMetrics | None = None,
    ) -> JobSnapshot:
        with self._store._lock:
            job = self._require(job_id)
            self._transition(job, JobStatus.DONE)
            job.step = "Done"
            job.output_path = output_path
            job.enhanced_file_url = enhanced_file_url
            job.output_metrics = output_metrics
            job.finished_at = utc_now()
            return JobSnapshot.of(job)

    def mark_failed(self, job_id: str, error: str) -> JobSnapshot:
        with self._store._lock:
            job = self._require(job_id)
            self._transition(job, JobStatus.FAILED)
            job.step = "Failed"
            job.error = error
            job.failed_at = utc_now()
            return JobSnapshot.of(job)

    def remove(self, job_id: str) -> JobSnapshot:
        """Drop a terminal job; live jobs cannot be removed."""

        with self._store._lock:
            job = self._require(job_id)
            if not job.status.is_terminal:
                raise JobStateError(f"Job '{job_id}' is {job.status.value}; only finished jobs can be removed.")
            del self._store._jobs[job_id]
            return JobSnapshot.of(job)
