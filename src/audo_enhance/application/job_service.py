"""Application service running enhancement jobs on a worker pool."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable

from audo_enhance.analysis import MeasurementAdapter, SpectralBandAnalyzer
from audo_enhance.application.classification_log import ClassificationEventLog
from audo_enhance.application.job_store import JobStore
from audo_enhance.application.ports import DspEngine, EventPublisher, InputFetcher, NullEventPublisher
from audo_enhance.audio_contract import CANONICAL_CHANNEL_COUNT, CANONICAL_SAMPLE_RATE_HZ
from audo_enhance.domain.errors import EnhancementError, JobCancelledError
from audo_enhance.domain.events import (
    ClassificationEvent,
    ClassificationEventType,
    JobCompleted,
    JobFailed,
    JobQueued,
    JobStageStarted,
)
from audo_enhance.domain.models import EnhancementRequest, JobSnapshot, JobStatus
from audo_enhance.enhancement_options import EnhancementType, FeedbackRating, FeedbackReason
from audo_enhance.infrastructure.scratch_space import ScratchSpace
from audo_enhance.normalization import LoudnessNormalizer
from audo_enhance.output_metrics import OutputMetrics, inspect_rendered_output, require_artifact
from audo_enhance.synthesis import synthesize_render_plan

logger = logging.getLogger(__name__)

STEP_DOWNLOADING = "Downloading audio..."
STEP_PREPARING = "Preparing audio..."
STEP_ANALYZING = "Analyzing tone & dynamics..."
STEP_PLANNING = "Building render plan..."
STEP_MEASURING_LOUDNESS = "Analyzing loudness..."
STEP_NORMALIZING = "Normalizing loudness..."
STEP_FINALIZING = "Finalizing..."

RENDER_STEP_LABELS: dict[EnhancementType, str] = {
    EnhancementType.MIX: "Mixing track...",
    EnhancementType.FOUR_D: "Creating 4D space...",
    EnhancementType.MASTER: "Mastering audio...",
}

DEFAULT_PUBLIC_BASE_URL = "http://localhost:10000"


@dataclass(frozen=True, slots=True)
class _RenderOutcome:
    output_path: Path
    output_metrics: OutputMetrics


def _describe_failure(error: BaseException) -> str:
    message = str(error).strip()
    return message or type(error).__name__


class EnhancementJobService:
    """Accept enhancement requests and drive each job to a terminal state.

    ``submit`` returns as soon as the job is queued. A worker runs the stages in
    order and records write-once results as they appear; a completion callback
    performs the terminal transition, logs the classification event and cleans
    up scratch files.
    """

    def __init__(
        self,
        *,
        engine: DspEngine,
        fetcher: InputFetcher,
        scratch: ScratchSpace,
        classification_log: ClassificationEventLog | None = None,
        store: JobStore | None = None,
        event_publisher: EventPublisher | None = None,
        executor: Executor | None = None,
        max_workers: int = 4,
        public_base_url: str = DEFAULT_PUBLIC_BASE_URL,
        output_inspector: Callable[[Path], OutputMetrics] = inspect_rendered_output,
    ) -> None:
        self.engine = engine
        self.fetcher = fetcher
        self.scratch = scratch
        self.classification_log = classification_log if classification_log is not None else ClassificationEventLog()
        self.store = store if store is not None else JobStore()
        self.event_publisher = event_publisher if event_publisher is not None else NullEventPublisher()
        self.public_base_url = public_base_url.rstrip("/")
        self.output_inspector = output_inspector
        self.analyzer = SpectralBandAnalyzer(MeasurementAdapter(engine))
        self.normalizer = LoudnessNormalizer(engine)

        self._owns_executor = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="audo-enhance")
        self._executor = executor
        self._writer = self.store.claim_writer()
        self._finished: dict[str, threading.Event] = {}
        self._finished_lock = threading.Lock()
        self._cancelled = threading.Event()

    def submit(self, request: EnhancementRequest) -> str:
        snapshot = self._writer.create(request)
        job_id = snapshot.job_id
        with self._finished_lock:
            self._finished[job_id] = threading.Event()

        self.event_publisher.publish(JobQueued(correlation_id=job_id, payload_summary=request.to_dict()))
        logger.info("Enhancement job queued", extra={"job_id": job_id, "mode": request.enhancement_type.value})

        try:
            future = self._executor.submit(self._execute, job_id, request)
        except RuntimeError as error:
            self._fail(job_id, error)
            self._signal_finished(job_id)
            return job_id
        future.add_done_callback(partial(self._on_finished, job_id))
        return job_id

    def snapshot(self, job_id: str) -> JobSnapshot | None:
        return self.store.snapshot(job_id)

    def wait(self, job_id: str, timeout: float | None = None) -> JobSnapshot | None:
        """Block until the job is terminal or ``timeout`` elapses; return its latest snapshot."""

        with self._finished_lock:
            finished = self._finished.get(job_id)
        if finished is not None:
            finished.wait(timeout)
        return self.store.snapshot(job_id)

    def output_file(self, job_id: str) -> Path | None:
        """Rendered output path for a finished job, if it is still on disk."""

        snapshot = self.store.snapshot(job_id)
        if snapshot is None or snapshot.status is not JobStatus.DONE or snapshot.output_path is None:
            return None
        return snapshot.output_path if snapshot.output_path.is_file() else None

    def record_feedback(
        self,
        job_id: str,
        rating: FeedbackRating,
        reason: FeedbackReason | None = None,
        notes: str | None = None,
        user_id: str | None = None,
    ) -> ClassificationEvent:
        """Log listener feedback; unknown job IDs are recorded without job context."""

        snapshot = self.store.snapshot(job_id)
        event = ClassificationEvent(
            event_type=ClassificationEventType.FEEDBACK,
            job_id=job_id,
            request=snapshot.request if snapshot else None,
            analysis=snapshot.analysis if snapshot else None,
            render_plan=snapshot.render_plan if snapshot else None,
            rating=rating,
            reason=reason,
            notes=notes,
            user_id=user_id,
        )
        self.classification_log.record(event)
        return event

    def forget(self, job_id: str) -> bool:
        """Evict a finished job: its record, wait handle and scratch directory.

        Returns ``False`` when the job is unknown or still running. Downloads of a
        forgotten job return 404.
        """

        snapshot = self.store.snapshot(job_id)
        if snapshot is None or not snapshot.status.is_terminal:
            return False
        self._writer.remove(job_id)
        with self._finished_lock:
            self._finished.pop(job_id, None)
        self.scratch.discard(job_id)
        logger.info("Enhancement job evicted", extra={"job_id": job_id})
        return True

    def recent_events(self, limit: int | None = None) -> list[ClassificationEvent]:
        return self.classification_log.recent(limit)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        """Stop accepting work.

        With ``cancel_futures`` queued jobs are cancelled and running jobs fail
        at their next stage boundary instead of running to completion.
        """

        if cancel_futures:
            self._cancelled.set()
        if self._owns_executor:
            self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def _enter_step(self, job_id: str, step: str) -> None:
        if self._cancelled.is_set():
            raise JobCancelledError("Enhancement job was cancelled before it finished.")
        self._writer.set_step(job_id, step)
        self.event_publisher.publish(JobStageStarted(correlation_id=job_id, payload_summary={"step": step}))
        logger.debug("Job stage started", extra={"job_id": job_id, "step": step})

    def _execute(self, job_id: str, request: EnhancementRequest) -> _RenderOutcome:
        self._writer.mark_processing(job_id)
        scratch = self.scratch.prepare(job_id)

        self._enter_step(job_id, STEP_DOWNLOADING)
        self.fetcher.fetch(request.input_file_url, scratch.source)

        self._enter_step(job_id, STEP_PREPARING)
        self.engine.decode(
            scratch.source,
            scratch.decoded,
            sample_rate_hz=CANONICAL_SAMPLE_RATE_HZ,
            channel_count=CANONICAL_CHANNEL_COUNT,
        )
        require_artifact(scratch.decoded)

        self._enter_step(job_id, STEP_ANALYZING)
        analysis = self.analyzer.analyze(scratch.decoded)
        self._writer.record_analysis(job_id, analysis)

        self._enter_step(job_id, STEP_PLANNING)
        plan = synthesize_render_plan(
            analysis.tags,
            request.enhancement_type,
            focus=request.focus,
            speed_multiplier=request.speed_multiplier,
            pitch_semitones=request.pitch_semitones,
            master_profile=request.master_profile,
        )
        self._writer.record_render_plan(job_id, plan)

        self._enter_step(job_id, RENDER_STEP_LABELS[request.enhancement_type])
        self.engine.render(scratch.decoded, scratch.prerender, plan.prepass_ops())
        require_artifact(scratch.prerender)

        self._enter_step(job_id, STEP_MEASURING_LOUDNESS)
        measurement = self.normalizer.measure(scratch.prerender, plan.loudness_target)
        self._writer.record_loudness(job_id, measurement)

        self._enter_step(job_id, STEP_NORMALIZING)
        self.normalizer.apply(
            scratch.prerender,
            scratch.output,
            plan.loudness_target,
            measurement,
            trailing_ops=plan.limiter_ops(),
        )

        self._enter_step(job_id, STEP_FINALIZING)
        metrics = self.output_inspector(scratch.output)
        return _RenderOutcome(output_path=scratch.output, output_metrics=metrics)

    def _on_finished(self, job_id: str, future: Future[_RenderOutcome]) -> None:
        try:
            if future.cancelled():
                self._fail(job_id, JobCancelledError("Enhancement job was cancelled before it started."))
                return
            error = future.exception()
            if error is not None:
                self._fail(job_id, error)
            else:
                self._complete(job_id, future.result())
        finally:
            self._signal_finished(job_id)

    def _complete(self, job_id: str, outcome: _RenderOutcome) -> None:
        snapshot = self._writer.mark_done(
            job_id,
            output_path=outcome.output_path,
            enhanced_file_url=f"{self.public_base_url}/download/{job_id}",
            output_metrics=outcome.output_metrics,
        )
        self.scratch.discard_intermediates(job_id)
        self.classification_log.record(
            ClassificationEvent(
                event_type=ClassificationEventType.RENDER_COMPLETED,
                job_id=job_id,
                request=snapshot.request,
                analysis=snapshot.analysis,
                render_plan=snapshot.render_plan,
                output_metrics=snapshot.output_metrics,
            )
        )
        self.event_publisher.publish(
            JobCompleted(
                correlation_id=job_id,
                payload_summary={
                    "enhanced_file_url": snapshot.enhanced_file_url,
                    "duration_seconds": outcome.output_metrics.duration_seconds,
                    "integrated_lufs": outcome.output_metrics.integrated_lufs,
                },
            )
        )
        logger.info("Enhancement job completed", extra={"job_id": job_id})

    def _fail(self, job_id: str, error: BaseException) -> None:
        message = _describe_failure(error)
        code = error.code if isinstance(error, EnhancementError) else "internal_error"
        snapshot = self._writer.mark_failed(job_id, message)
        self.scratch.discard(job_id)
        self.classification_log.record(
            ClassificationEvent(
                event_type=ClassificationEventType.RENDER_FAILED,
                job_id=job_id,
                request=snapshot.request,
                analysis=snapshot.analysis,
                render_plan=snapshot.render_plan,
                error=message,
            )
        )
        self.event_publisher.publish(
            JobFailed(correlation_id=job_id, payload_summary={"code": code, "error": message})
        )
        logger.warning(
            "Enhancement job failed",
            extra={"job_id": job_id, "error_code": code},
            exc_info=error if not isinstance(error, EnhancementError) else None,
        )

    def _signal_finished(self, job_id: str) -> None:
        with self._finished_lock:
            finished = self._finished.get(job_id)
        if finished is not None:
            finished.set()
