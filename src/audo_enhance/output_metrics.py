"""Post-render verification and loudness metrics for output artifacts."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pyloudnorm as pyln
from pedalboard.io import AudioFile

from .domain.errors import IntegrityError

# BS.1770 gating needs at least one 400 ms block.
_MIN_LOUDNESS_SECONDS = 0.4
_TRUE_PEAK_OVERSAMPLE = 4


def _finite_or_none(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class OutputMetrics:
    """Figures measured on a finished render."""

    duration_seconds: float
    sample_rate_hz: int
    channel_count: int
    peak_dbfs: float
    true_peak_dbtp: float
    integrated_lufs: float | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "durationSeconds": round(self.duration_seconds, 6),
            "sampleRateHz": self.sample_rate_hz,
            "channelCount": self.channel_count,
            "peakDbfs": _finite_or_none(self.peak_dbfs),
            "truePeakDbtp": _finite_or_none(self.true_peak_dbtp),
            "integratedLufs": _finite_or_none(self.integrated_lufs),
        }


def _audio_for_loudness_measurement(audio: np.ndarray) -> np.ndarray:
    """Convert channel-first pedalboard arrays for pyloudnorm."""

    if audio.ndim == 1:
        return audio.astype(np.float64, copy=False)
    return np.moveaxis(audio, 0, -1).astype(np.float64, copy=False)


def measure_integrated_lufs(audio: np.ndarray, sample_rate: int) -> float | None:
    """Integrated loudness in LUFS, or ``None`` when the clip is too short or silent."""

    frames = audio.shape[-1]
    if frames < int(_MIN_LOUDNESS_SECONDS * sample_rate):
        return None
    meter = pyln.Meter(sample_rate)
    return _finite_or_none(float(meter.integrated_loudness(_audio_for_loudness_measurement(audio))))


def measure_sample_peak_dbfs(audio: np.ndarray) -> float:
    peak = float(np.max(np.abs(audio))) if audio.size else 0.0
    if peak <= 0.0:
        return -math.inf
    return 20.0 * math.log10(peak)


def measure_true_peak_dbtp(audio: np.ndarray, oversample_factor: int = _TRUE_PEAK_OVERSAMPLE) -> float:
    """Estimate true peak (dBTP) by linear interpolation between samples.

    The oversampled grid contains every original sample position, so the result
    is never below the sample peak.
    """

    if oversample_factor < 1:
        raise ValueError("oversample_factor must be >= 1")

    samples = np.atleast_2d(np.asarray(audio, dtype=np.float64))
    frames = samples.shape[-1]
    if frames == 0:
        return -math.inf

    positions = np.arange(frames, dtype=np.float64)
    grid = np.arange((frames - 1) * oversample_factor + 1, dtype=np.float64) / oversample_factor
    peak = max(float(np.max(np.abs(np.interp(grid, positions, channel)))) for channel in samples)
    if peak <= 0.0:
        return -math.inf
    return 20.0 * math.log10(peak)


def _decode(path: Path) -> tuple[np.ndarray, int]:
    with AudioFile(str(path), "r") as audio_file:
        return audio_file.read(audio_file.frames), int(audio_file.samplerate)


def require_artifact(path: Path) -> None:
    """Raise :class:`IntegrityError` unless ``path`` is a non-empty file."""

    if not path.is_file():
        raise IntegrityError(f"Expected render artifact is missing: {path.name}")
    if path.stat().st_size == 0:
        raise IntegrityError(f"Render artifact is empty: {path.name}")


def inspect_rendered_output(path: Path) -> OutputMetrics:
    """Decode a finished render and measure it; undecodable or silent-length files fail."""

    require_artifact(path)
    try:
        audio, sample_rate = _decode(path)
    except Exception as exc:  # noqa: BLE001
        raise IntegrityError(f"Render artifact could not be decoded: {path.name}") from exc

    channel_count = 1 if audio.ndim == 1 else int(audio.shape[0])
    frames = int(audio.shape[-1])
    if frames == 0 or sample_rate <= 0:
        raise IntegrityError(f"Render artifact contains no audio frames: {path.name}")

    return OutputMetrics(
        duration_seconds=frames / sample_rate,
        sample_rate_hz=sample_rate,
        channel_count=channel_count,
        peak_dbfs=measure_sample_peak_dbfs(audio),
        true_peak_dbtp=measure_true_peak_dbtp(audio),
        integrated_lufs=measure_integrated_lufs(audio, sample_rate),
    )
