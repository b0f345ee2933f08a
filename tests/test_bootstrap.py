from __future__ import annotations

import json
from pathlib import Path

from audo_enhance.bootstrap import build_job_service
from audo_enhance.enhancement_options import FeedbackRating
from audo_enhance.infrastructure.ffmpeg_engine import FfmpegEngine
from audo_enhance.utils.config import ServiceConfig


def test_configured_event_log_is_used_and_persisted(tmp_path: Path) -> None:
    config = ServiceConfig(scratch_root=tmp_path, event_ring_capacity=7, ffmpeg_binary="/opt/ffmpeg")
    service = build_job_service(config)
    try:
        event = service.record_feedback("job-1", FeedbackRating.SATISFIED)
    finally:
        service.shutdown()

    assert service.classification_log.capacity == 7
    assert service.recent_events() == [event]
    assert isinstance(service.engine, FfmpegEngine)
    assert service.engine.binary == "/opt/ffmpeg"
    lines = (tmp_path / "classification_events.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["eventId"] for line in lines] == [event.event_id]


def test_blank_event_log_path_disables_durable_sink(tmp_path: Path) -> None:
    config = ServiceConfig(scratch_root=tmp_path, event_log_path="")
    service = build_job_service(config)
    try:
        service.record_feedback("job-1", FeedbackRating.NOT_SATISFIED)
    finally:
        service.shutdown()

    assert len(service.recent_events()) == 1
    assert not (tmp_path / "classification_events.jsonl").exists()
