"""API-facing handlers that delegate to application services."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from audo_enhance.application.job_service import EnhancementJobService
from audo_enhance.bootstrap import build_job_service
from audo_enhance.domain.events import ClassificationEvent
from audo_enhance.request_validation import validate_enhancement_request, validate_feedback
from audo_enhance.utils.config import load_service_config


@lru_cache(maxsize=1)
def get_job_service() -> EnhancementJobService:
    """Process-wide job service built from environment configuration."""

    return build_job_service(load_service_config())


def submit_enhancement(service: EnhancementJobService, payload: dict[str, Any]) -> str:
    request = validate_enhancement_request(
        payload.get("inputFileUrl"),
        payload.get("enhancementType"),
        speed_multiplier=payload.get("speedMultiplier"),
        pitch_semitones=payload.get("pitchSemitones"),
        focus=payload.get("focus"),
        master_profile=payload.get("masterProfile"),
    )
    return service.submit(request)


def submit_feedback(service: EnhancementJobService, payload: dict[str, Any]) -> ClassificationEvent:
    feedback = validate_feedback(
        payload.get("jobId"),
        payload.get("rating"),
        reason=payload.get("reason"),
        notes=payload.get("notes"),
        user_id=payload.get("userId"),
    )
    return service.record_feedback(
        feedback.job_id,
        feedback.rating,
        reason=feedback.reason,
        notes=feedback.notes,
        user_id=feedback.user_id,
    )


__all__ = ["get_job_service", "submit_enhancement", "submit_feedback"]
