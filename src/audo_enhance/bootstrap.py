"""Wire concrete adapters into the enhancement job service."""

from __future__ import annotations

from audo_enhance.application.classification_log import ClassificationEventLog
from audo_enhance.application.ports import EventPublisher
from audo_enhance.application.job_service import EnhancementJobService
from audo_enhance.infrastructure.classification_sinks import JsonlClassificationSink, NullClassificationSink
from audo_enhance.infrastructure.ffmpeg_engine import FfmpegEngine
from audo_enhance.infrastructure.http_fetch import HttpInputFetcher
from audo_enhance.infrastructure.logging_event_publisher import LoggingEventPublisher
from audo_enhance.infrastructure.scratch_space import ScratchSpace
from audo_enhance.utils.config import ServiceConfig


def build_job_service(
    config: ServiceConfig,
    *,
    allow_local_files: bool = False,
    event_publisher: EventPublisher | None = None,
) -> EnhancementJobService:
    sink = (
        JsonlClassificationSink(config.event_log_path)
        if config.event_log_path is not None
        else NullClassificationSink()
    )
    return EnhancementJobService(
        engine=FfmpegEngine(binary=config.ffmpeg_binary, diagnostic_limit=config.diagnostic_limit),
        fetcher=HttpInputFetcher(
            timeout_seconds=config.fetch_timeout_seconds,
            max_bytes=config.max_input_bytes,
            allow_local_files=allow_local_files,
        ),
        scratch=ScratchSpace(config.scratch_root),
        classification_log=ClassificationEventLog(capacity=config.event_ring_capacity, sink=sink),
        event_publisher=event_publisher if event_publisher is not None else LoggingEventPublisher(),
        max_workers=config.max_workers,
        public_base_url=config.public_base_url,
    )
