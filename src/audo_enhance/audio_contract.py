"""Canonical audio contract shared by every pipeline stage.

Invariants
----------
* Input audio is decoded once, right after transfer, into the canonical stream
  format defined here.
* Every downstream stage (analysis, rendering, normalization) reads the previous
  stage's fully written file, never a stream.
"""

from __future__ import annotations

# Decode target used between transfer and every DSP stage.
CANONICAL_SAMPLE_RATE_HZ = 48_000
CANONICAL_CHANNEL_COUNT = 2
CANONICAL_SAMPLE_FORMAT = "fltp"
CANONICAL_CHANNEL_LAYOUT = "stereo"
# Every WAV the engine writes is float, so samples above 0 dBFS reach the limiter intact.
CANONICAL_WAV_CODEC = "pcm_f32le"

# Output container served back to callers.
OUTPUT_MEDIA_TYPE = "audio/wav"
OUTPUT_FILENAME_TEMPLATE = "enhanced-{job_id}.wav"

# Accepted request ranges.
SPEED_MULTIPLIER_RANGE: tuple[float, float] = (0.5, 2.0)
PITCH_SEMITONES_RANGE: tuple[float, float] = (-4.0, 4.0)
