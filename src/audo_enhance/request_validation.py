"""Validation of enhancement and feedback submissions.

Everything here runs before a job exists; a rejected request never reaches the
job store or the classification log.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar
from urllib.parse import urlparse

from .audio_contract import PITCH_SEMITONES_RANGE, SPEED_MULTIPLIER_RANGE
from .domain.models import EnhancementRequest
from .enhancement_options import (
    EnhancementType,
    FeedbackRating,
    FeedbackReason,
    Focus,
    MasterProfile,
    enum_values,
    parse_case_insensitive_enum,
)

HTTP_URL_SCHEMES: tuple[str, ...] = ("http", "https")
MAX_FEEDBACK_NOTES_LENGTH = 2_000

EnumT = TypeVar("EnumT", bound=Enum)


@dataclass(frozen=True, slots=True)
class RequestValidationError(ValueError):
    code: str
    message: str
    parameter: str | None = None
    allowed_values: tuple[str, ...] | None = None

    def __str__(self) -> str:
        return self.message

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message, "parameter": self.parameter}
        if self.allowed_values is not None:
            payload["allowed_values"] = list(self.allowed_values)
        return payload


@dataclass(frozen=True, slots=True)
class FeedbackSubmission:
    job_id: str
    rating: FeedbackRating
    reason: FeedbackReason | None
    notes: str | None
    user_id: str | None


def _parse_enum(raw_value: Any, enum_cls: type[EnumT], parameter: str, default: EnumT | None = None) -> EnumT:
    if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
        if default is not None:
            return default
        raise RequestValidationError(
            "missing_parameter",
            f"'{parameter}' is required.",
            parameter=parameter,
            allowed_values=enum_values(enum_cls),
        )
    if isinstance(raw_value, enum_cls):
        return raw_value
    if not isinstance(raw_value, str):
        raise RequestValidationError(
            "invalid_parameter",
            f"'{parameter}' must be a string.",
            parameter=parameter,
            allowed_values=enum_values(enum_cls),
        )
    try:
        return parse_case_insensitive_enum(raw_value, enum_cls)
    except ValueError as error:
        raise RequestValidationError(
            "invalid_parameter",
            str(error),
            parameter=parameter,
            allowed_values=enum_values(enum_cls),
        ) from error


def _parse_ranged_number(raw_value: Any, parameter: str, bounds: tuple[float, float], default: float) -> float:
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        raise RequestValidationError("invalid_parameter", f"'{parameter}' must be a number.", parameter=parameter)
    try:
        value = float(raw_value)
    except (TypeError, ValueError) as error:
        raise RequestValidationError(
            "invalid_parameter", f"'{parameter}' must be a number.", parameter=parameter
        ) from error

    low, high = bounds
    if not math.isfinite(value) or not low <= value <= high:
        raise RequestValidationError(
            "out_of_range",
            f"'{parameter}' must be between {low:g} and {high:g}; got {raw_value!r}.",
            parameter=parameter,
        )
    return value


def _validate_input_url(raw_value: Any, allowed_schemes: tuple[str, ...]) -> str:
    parameter = "inputFileUrl"
    if not isinstance(raw_value, str) or not raw_value.strip():
        raise RequestValidationError("missing_parameter", f"'{parameter}' is required.", parameter=parameter)

    url = raw_value.strip()
    scheme = urlparse(url).scheme.lower()
    if scheme not in allowed_schemes:
        raise RequestValidationError(
            "unsupported_url_scheme",
            f"'{parameter}' must use one of: {', '.join(allowed_schemes)}.",
            parameter=parameter,
            allowed_values=allowed_schemes,
        )
    if scheme in HTTP_URL_SCHEMES and not urlparse(url).netloc:
        raise RequestValidationError("invalid_parameter", f"'{parameter}' must include a host.", parameter=parameter)
    return url


def validate_enhancement_request(
    input_file_url: Any,
    enhancement_type: Any,
    speed_multiplier: Any = None,
    pitch_semitones: Any = None,
    focus: Any = None,
    master_profile: Any = None,
    *,
    allowed_schemes: tuple[str, ...] = HTTP_URL_SCHEMES,
) -> EnhancementRequest:
    """Parse raw submission values into an :class:`EnhancementRequest`.

    Enum values match case-insensitively; omitted optional values take their
    defaults. Raises :class:`RequestValidationError` on the first bad parameter.
    """

    return EnhancementRequest(
        input_file_url=_validate_input_url(input_file_url, allowed_schemes),
        enhancement_type=_parse_enum(enhancement_type, EnhancementType, "enhancementType"),
        speed_multiplier=_parse_ranged_number(speed_multiplier, "speedMultiplier", SPEED_MULTIPLIER_RANGE, 1.0),
        pitch_semitones=_parse_ranged_number(pitch_semitones, "pitchSemitones", PITCH_SEMITONES_RANGE, 0.0),
        focus=_parse_enum(focus, Focus, "focus", default=Focus.NONE),
        master_profile=_parse_enum(master_profile, MasterProfile, "masterProfile", default=MasterProfile.STREAMING),
    )


def _optional_text(raw_value: Any, parameter: str, max_length: int | None = None) -> str | None:
    if raw_value is None:
        return None
    if not isinstance(raw_value, str):
        raise RequestValidationError("invalid_parameter", f"'{parameter}' must be a string.", parameter=parameter)
    if max_length is not None and len(raw_value) > max_length:
        raise RequestValidationError(
            "out_of_range",
            f"'{parameter}' must be at most {max_length} characters.",
            parameter=parameter,
        )
    return raw_value or None


def validate_feedback(
    job_id: Any,
    rating: Any,
    reason: Any = None,
    notes: Any = None,
    user_id: Any = None,
) -> FeedbackSubmission:
    if not isinstance(job_id, str) or not job_id.strip():
        raise RequestValidationError("missing_parameter", "'jobId' is required.", parameter="jobId")

    parsed_reason = None if reason is None else _parse_enum(reason, FeedbackReason, "reason")
    return FeedbackSubmission(
        job_id=job_id.strip(),
        rating=_parse_enum(rating, FeedbackRating, "rating"),
        reason=parsed_reason,
        notes=_optional_text(notes, "notes", MAX_FEEDBACK_NOTES_LENGTH),
        user_id=_optional_text(user_id, "userId"),
    )
