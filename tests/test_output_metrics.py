from __future__ import annotations

import math
import wave
from pathlib import Path

import numpy as np
import pytest

from audo_enhance.domain.errors import IntegrityError
from audo_enhance.output_metrics import (
    inspect_rendered_output,
    measure_sample_peak_dbfs,
    measure_true_peak_dbtp,
    require_artifact,
)


def _write_wav(path: Path, audio: np.ndarray, sample_rate: int) -> Path:
    pcm = np.clip(audio, -1.0, 1.0)
    interleaved = (pcm.T * 32767.0).astype("<i2")
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(audio.shape[0])
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(interleaved.tobytes())
    return path


def test_inspect_rendered_output_measures_stereo_sine(sine_wave, tmp_path: Path) -> None:
    path = _write_wav(tmp_path / "output.wav", sine_wave["stereo"], sine_wave["sample_rate"])

    metrics = inspect_rendered_output(path)

    assert metrics.sample_rate_hz == 48_000
    assert metrics.channel_count == 2
    assert metrics.duration_seconds == pytest.approx(2.0)
    assert metrics.peak_dbfs == pytest.approx(20 * math.log10(0.5), abs=0.05)
    assert metrics.true_peak_dbtp >= metrics.peak_dbfs
    assert metrics.integrated_lufs is not None
    assert -12.0 < metrics.integrated_lufs < -2.0


def test_short_output_has_no_integrated_loudness(tmp_path: Path) -> None:
    audio = np.full((2, 4_800), 0.25, dtype=np.float32)
    path = _write_wav(tmp_path / "short.wav", audio, 48_000)

    metrics = inspect_rendered_output(path)

    assert metrics.integrated_lufs is None
    assert metrics.to_dict()["integratedLufs"] is None


def test_missing_and_empty_artifacts_fail_integrity(tmp_path: Path) -> None:
    with pytest.raises(IntegrityError, match="missing"):
        require_artifact(tmp_path / "output.wav")

    (tmp_path / "output.wav").write_bytes(b"")
    with pytest.raises(IntegrityError, match="empty"):
        inspect_rendered_output(tmp_path / "output.wav")


def test_undecodable_artifact_fails_integrity(tmp_path: Path) -> None:
    path = tmp_path / "output.wav"
    path.write_bytes(b"definitely not a wav file")

    with pytest.raises(IntegrityError, match="could not be decoded"):
        inspect_rendered_output(path)


def test_true_peak_of_silence_is_negative_infinity() -> None:
    assert measure_true_peak_dbtp(np.zeros((2, 32))) == -math.inf


def test_true_peak_rejects_invalid_oversampling() -> None:
    with pytest.raises(ValueError):
        measure_true_peak_dbtp(np.zeros(4), oversample_factor=0)


def test_true_peak_never_reads_below_sample_peak() -> None:
    assert measure_true_peak_dbtp(np.array([[0.0, 1.0, 0.0], [0.0, -0.5, 0.0]])) == 0.0

    noise = np.random.default_rng(7).uniform(-0.9, 0.9, size=(2, 1_001)).astype(np.float32)
    assert measure_true_peak_dbtp(noise) >= measure_sample_peak_dbfs(noise)
