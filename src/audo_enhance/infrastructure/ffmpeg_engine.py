"""DSP engine adapter backed by the ``ffmpeg`` command line tool."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from audo_enhance.audio_contract import CANONICAL_WAV_CODEC
from audo_enhance.domain.errors import EngineError
from audo_enhance.filtergraph import FilterOp, serialize_filter_chain

logger = logging.getLogger(__name__)

DEFAULT_DIAGNOSTIC_LIMIT = 2_000


def truncate_diagnostic(text: str, limit: int = DEFAULT_DIAGNOSTIC_LIMIT) -> str:
    """Keep the tail of engine output, where ffmpeg reports the actual failure."""

    stripped = text.strip()
    if limit <= 0 or len(stripped) <= limit:
        return stripped
    return stripped[-limit:]


@dataclass(frozen=True, slots=True)
class FfmpegEngine:
    """Invoke ffmpeg as one independent subprocess per call."""

    binary: str = "ffmpeg"
    diagnostic_limit: int = DEFAULT_DIAGNOSTIC_LIMIT
    wav_codec: str = CANONICAL_WAV_CODEC

    def run(self, args: Sequence[str]) -> str:
        """Run ffmpeg and return stdout and stderr concatenated."""

        command = [self.binary, "-hide_banner", "-nostdin", *args]
        logger.debug("Running DSP engine", extra={"command": command})
        try:
            result = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise EngineError(f"Could not start DSP engine '{self.binary}'", diagnostic=str(exc)) from exc

        combined = f"{result.stdout or ''}\n{result.stderr or ''}"
        if result.returncode != 0:
            raise EngineError(
                f"DSP engine exited with status {result.returncode}",
                diagnostic=truncate_diagnostic(combined, self.diagnostic_limit),
                returncode=result.returncode,
            )
        return combined

    def decode(self, source: Path, destination: Path, *, sample_rate_hz: int, channel_count: int) -> None:
        self.run(
            [
                "-y",
                "-i",
                str(source),
                "-ac",
                str(channel_count),
                "-ar",
                str(sample_rate_hz),
                "-c:a",
                self.wav_codec,
                str(destination),
            ]
        )

    def render(self, source: Path, destination: Path, ops: Sequence[FilterOp]) -> None:
        self.run(
            ["-y", "-i", str(source), "-af", serialize_filter_chain(ops), "-c:a", self.wav_codec, str(destination)]
        )

    def measure(self, source: Path, ops: Sequence[FilterOp]) -> str:
        return self.run(["-i", str(source), "-af", serialize_filter_chain(ops), "-f", "null", "-"])
