"""Parsers for measurement figures the DSP engine prints in-band.

The engine reports measurements as free text mixed into its diagnostic output.
Parsing is kept here, narrowly scoped, so that every structural deviation is
surfaced explicitly instead of being replaced by a default value.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any

from .domain.errors import MeasurementParseError

_VOLUME_PATTERNS = {
    "mean": re.compile(r"mean_volume:\s*(?P<value>[-+]?(?:inf|\d+(?:\.\d+)?))\s*dB"),
    "max": re.compile(r"max_volume:\s*(?P<value>[-+]?(?:inf|\d+(?:\.\d+)?))\s*dB"),
}

LOUDNESS_REPORT_FIELDS: tuple[str, ...] = (
    "input_i",
    "input_tp",
    "input_lra",
    "input_thresh",
    "target_offset",
)


@dataclass(frozen=True, slots=True)
class VolumeStats:
    """Mean and peak level of one measured stream, in dBFS.

    A value is ``nan`` when the engine did not report it.
    """

    mean_db: float
    max_db: float


@dataclass(frozen=True, slots=True)
class LoudnessMeasurement:
    """First-pass loudness report used to drive the linear apply pass."""

    input_i: float
    input_tp: float
    input_lra: float
    input_thresh: float
    target_offset: float

    def to_dict(self) -> dict[str, float]:
        return {
            "inputI": self.input_i,
            "inputTp": self.input_tp,
            "inputLra": self.input_lra,
            "inputThresh": self.input_thresh,
            "targetOffset": self.target_offset,
        }


def _last_volume_value(text: str, key: str) -> float:
    matches = _VOLUME_PATTERNS[key].findall(text)
    if not matches:
        return math.nan
    return float(matches[-1])


def parse_volume_stats(text: str) -> VolumeStats:
    """Extract ``mean_volume``/``max_volume`` from volume detection output."""

    return VolumeStats(mean_db=_last_volume_value(text, "mean"), max_db=_last_volume_value(text, "max"))


def extract_json_block(text: str) -> dict[str, Any]:
    """Return the object spanning the first ``{`` to the last ``}`` in ``text``."""

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MeasurementParseError("Loudness analysis failed: no measurement report found in engine output.")
    try:
        payload = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MeasurementParseError(f"Loudness analysis failed: malformed measurement report ({exc.msg}).") from exc
    if not isinstance(payload, dict):
        raise MeasurementParseError("Loudness analysis failed: measurement report is not an object.")
    return payload


def parse_loudness_report(text: str) -> LoudnessMeasurement:
    """Parse the loudness analysis pass report; every field is mandatory."""

    payload = extract_json_block(text)
    values: dict[str, float] = {}
    for field_name in LOUDNESS_REPORT_FIELDS:
        if field_name not in payload:
            raise MeasurementParseError(f"Loudness analysis failed: report is missing '{field_name}'.")
        try:
            value = float(payload[field_name])
        except (TypeError, ValueError) as exc:
            raise MeasurementParseError(
                f"Loudness analysis failed: '{field_name}' is not numeric ({payload[field_name]!r})."
            ) from exc
        if not math.isfinite(value):
            raise MeasurementParseError(f"Loudness analysis failed: '{field_name}' is not finite ({value}).")
        values[field_name] = value
    return LoudnessMeasurement(**values)
