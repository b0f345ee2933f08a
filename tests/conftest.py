from __future__ import annotations

import json
from concurrent.futures import Executor, Future
from pathlib import Path

import numpy as np
import pytest

from audo_enhance.analysis import BAND_FILTERS
from audo_enhance.application.classification_log import ClassificationEventLog
from audo_enhance.application.job_service import EnhancementJobService
from audo_enhance.domain.errors import EngineError, TransferError
from audo_enhance.infrastructure.scratch_space import ScratchSpace
from audo_enhance.output_metrics import OutputMetrics, require_artifact

NEUTRAL_BANDS = {
    "low": (-20.0, -6.0),
    "mid": (-15.0, -4.0),
    "high": (-25.0, -9.0),
    "full": (-14.0, -3.0),
}

DEFAULT_LOUDNESS_REPORT = {
    "input_i": "-20.31",
    "input_tp": "-4.02",
    "input_lra": "6.40",
    "input_thresh": "-30.55",
    "output_i": "-14.00",
    "normalization_type": "dynamic",
    "target_offset": "0.12",
}

FAKE_METRICS = OutputMetrics(
    duration_seconds=2.0,
    sample_rate_hz=48_000,
    channel_count=2,
    peak_dbfs=-1.3,
    true_peak_dbtp=-1.1,
    integrated_lufs=-14.1,
)


class FakeEngine:
    """Scripted DSP engine: writes placeholder files and prints canned measurements."""

    def __init__(self) -> None:
        self.band_levels = dict(NEUTRAL_BANDS)
        self.loudness_report: dict | str = dict(DEFAULT_LOUDNESS_REPORT)
        self.fail_on: str | None = None
        self.empty_render = False
        self.calls: list[tuple[str, tuple]] = []

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise EngineError("DSP engine exited with status 1", diagnostic="Invalid data found", returncode=1)

    def decode(self, source: Path, destination: Path, *, sample_rate_hz: int, channel_count: int) -> None:
        self.calls.append(("decode", (sample_rate_hz, channel_count)))
        self._maybe_fail("decode")
        destination.write_bytes(b"decoded")

    def render(self, source: Path, destination: Path, ops) -> None:
        self.calls.append(("render", tuple(ops)))
        self._maybe_fail("render")
        destination.write_bytes(b"" if self.empty_render else b"rendered")

    def measure(self, source: Path, ops) -> str:
        ops = tuple(ops)
        self.calls.append(("measure", ops))
        if ops and ops[0].name == "loudnorm":
            self._maybe_fail("loudness")
            report = self.loudness_report
            body = report if isinstance(report, str) else json.dumps(report, indent=4)
            return f"[Parsed_loudnorm_0 @ 0x55d]\n{body}\n"

        self._maybe_fail("volume")
        band = next(name for name, filters in BAND_FILTERS.items() if tuple(filters) == ops[:-1])
        mean_db, max_db = self.band_levels[band]
        return (
            f"[Parsed_volumedetect_1 @ 0x55d] n_samples: 96000\n"
            f"[Parsed_volumedetect_1 @ 0x55d] mean_volume: {mean_db:.1f} dB\n"
            f"[Parsed_volumedetect_1 @ 0x55d] max_volume: {max_db:.1f} dB\n"
        )

    def renders(self) -> list[tuple]:
        return [args for name, args in self.calls if name == "render"]


class FakeFetcher:
    def __init__(self, payload: bytes = b"input-bytes", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.urls: list[str] = []

    def fetch(self, url: str, destination: Path) -> Path:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        destination.write_bytes(self.payload)
        return destination


class DeferredExecutor(Executor):
    """Executor that queues work until ``run_pending`` is called."""

    def __init__(self) -> None:
        self.pending: list[tuple[Future, object, tuple, dict]] = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_pending(self) -> None:
        while self.pending:
            future, fn, args, kwargs = self.pending.pop(0)
            future.set_running_or_notify_cancel()
            try:
                result = fn(*args, **kwargs)
            except BaseException as error:  # noqa: BLE001
                future.set_exception(error)
            else:
                future.set_result(result)


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


class RecordingSink:
    def __init__(self, error: Exception | None = None) -> None:
        self.events = []
        self.error = error

    def append(self, event) -> None:
        if self.error is not None:
            raise self.error
        self.events.append(event)


def fake_inspector(path: Path) -> OutputMetrics:
    require_artifact(path)
    return FAKE_METRICS


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def failing_fetcher() -> FakeFetcher:
    return FakeFetcher(error=TransferError("Failed to fetch input file: 404"))


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def deferred_executor() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture
def make_service(tmp_path, fake_engine, fake_fetcher, publisher, recording_sink, deferred_executor):
    """Build a job service over fakes; keyword overrides replace any collaborator."""

    def _make(**overrides) -> EnhancementJobService:
        options = {
            "engine": fake_engine,
            "fetcher": fake_fetcher,
            "scratch": ScratchSpace(tmp_path / "scratch"),
            "classification_log": ClassificationEventLog(capacity=50, sink=recording_sink),
            "event_publisher": publisher,
            "executor": deferred_executor,
            "public_base_url": "http://enhance.test",
            "output_inspector": fake_inspector,
        }
        options.update(overrides)
        return EnhancementJobService(**options)

    return _make


@pytest.fixture
def sine_wave():
    sample_rate = 48_000
    duration_s = 2.0
    t = np.linspace(0.0, duration_s, int(sample_rate * duration_s), endpoint=False)
    base = np.sin(2 * np.pi * 440.0 * t)
    return {
        "sample_rate": sample_rate,
        "stereo": np.stack([0.5 * base, 0.5 * base]).astype(np.float32),
    }
