"""CLI-facing handlers that delegate to application services."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Iterable
from urllib.parse import urlparse

from audo_enhance.analysis import AnalysisResult, MeasurementAdapter, SpectralBandAnalyzer, Tag
from audo_enhance.audio_contract import CANONICAL_CHANNEL_COUNT, CANONICAL_SAMPLE_RATE_HZ
from audo_enhance.bootstrap import build_job_service
from audo_enhance.domain.errors import EnhancementError
from audo_enhance.domain.models import JobSnapshot, JobStatus
from audo_enhance.enhancement_options import EnhancementType, Focus, MasterProfile, parse_case_insensitive_enum
from audo_enhance.infrastructure.ffmpeg_engine import FfmpegEngine
from audo_enhance.request_validation import HTTP_URL_SCHEMES, validate_enhancement_request
from audo_enhance.synthesis import RenderPlan, synthesize_render_plan
from audo_enhance.utils.config import ServiceConfig, load_service_config

CLI_URL_SCHEMES: tuple[str, ...] = (*HTTP_URL_SCHEMES, "file")


def _as_input_url(source: str) -> str:
    """Pass URLs through; turn bare local paths into ``file://`` URLs."""

    if urlparse(source).scheme.lower() in CLI_URL_SCHEMES:
        return source
    return Path(source).expanduser().resolve().as_uri()


def enhance_from_source(
    source: str,
    output: Path,
    enhancement_type: EnhancementType,
    speed_multiplier: float = 1.0,
    pitch_semitones: float = 0.0,
    focus: Focus = Focus.NONE,
    master_profile: MasterProfile = MasterProfile.STREAMING,
    report_json: Path | None = None,
    timeout_seconds: float | None = None,
    config: ServiceConfig | None = None,
) -> JobSnapshot:
    """Run one enhancement job to completion and copy its output to ``output``."""

    request = validate_enhancement_request(
        _as_input_url(source),
        enhancement_type,
        speed_multiplier=speed_multiplier,
        pitch_semitones=pitch_semitones,
        focus=focus,
        master_profile=master_profile,
        allowed_schemes=CLI_URL_SCHEMES,
    )
    service = build_job_service(config or load_service_config(), allow_local_files=True)
    finished = False
    try:
        job_id = service.submit(request)
        snapshot = service.wait(job_id, timeout=timeout_seconds)
        if snapshot is None or not snapshot.status.is_terminal:
            raise EnhancementError(f"Enhancement job {job_id} did not finish in time.")
        finished = True

        if report_json is not None:
            report_json.parent.mkdir(parents=True, exist_ok=True)
            report_json.write_text(json.dumps(snapshot.to_dict(), indent=2), encoding="utf-8")

        if snapshot.status is JobStatus.DONE:
            rendered = service.output_file(job_id)
            if rendered is None:
                raise EnhancementError(f"Enhancement job {job_id} finished without an output file.")
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(rendered, output)
            service.forget(job_id)
        return snapshot
    finally:
        # An unfinished job is abandoned rather than awaited.
        service.shutdown(wait=finished, cancel_futures=not finished)


def analyze_local_file(source: Path, config: ServiceConfig | None = None) -> AnalysisResult:
    """Decode ``source`` to the canonical format and classify it."""

    config = config or load_service_config()
    engine = FfmpegEngine(binary=config.ffmpeg_binary, diagnostic_limit=config.diagnostic_limit)
    with TemporaryDirectory(prefix="audo-enhance-") as scratch_dir:
        decoded = Path(scratch_dir) / "decoded.wav"
        engine.decode(
            source,
            decoded,
            sample_rate_hz=CANONICAL_SAMPLE_RATE_HZ,
            channel_count=CANONICAL_CHANNEL_COUNT,
        )
        return SpectralBandAnalyzer(MeasurementAdapter(engine)).analyze(decoded)


def describe_render_plan(
    tags: Iterable[str],
    enhancement_type: EnhancementType,
    focus: Focus = Focus.NONE,
    speed_multiplier: float = 1.0,
    pitch_semitones: float = 0.0,
    master_profile: MasterProfile = MasterProfile.STREAMING,
) -> RenderPlan:
    parsed_tags = [parse_case_insensitive_enum(tag, Tag) for tag in tags]
    return synthesize_render_plan(
        parsed_tags,
        enhancement_type,
        focus=focus,
        speed_multiplier=speed_multiplier,
        pitch_semitones=pitch_semitones,
        master_profile=master_profile,
    )
