"""Spectral band analysis that turns engine measurements into tone tags."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from .application.ports import DspEngine
from .filtergraph import FilterOp, filter_op
from .measurement import VolumeStats, parse_volume_stats

_LOW_BAND_CUTOFF_HZ = 200
_HIGH_BAND_CUTOFF_HZ = 8_000

_LOW_END_WEAK_BELOW_DB = -8.0
_LOW_END_HEAVY_ABOVE_DB = 6.0
_HARSH_HIGHS_ABOVE_DB = -3.0
_DULL_HIGHS_BELOW_DB = -14.0
_MID_FORWARD_ABOVE_DB = 2.5
_TOO_LOUD_PEAK_ABOVE_DB = -1.0
_TOO_QUIET_MEAN_BELOW_DB = -22.0


class Tag(str, Enum):
    """Qualitative tone/level tags, declared in evaluation order."""

    LOW_END_WEAK = "low_end_weak"
    LOW_END_HEAVY = "low_end_heavy"
    HARSH_HIGHS = "harsh_highs"
    DULL_HIGHS = "dull_highs"
    MID_FORWARD = "mid_forward"
    TOO_LOUD = "too_loud"
    TOO_QUIET = "too_quiet"


TAG_ORDER: tuple[Tag, ...] = tuple(Tag)

BAND_FILTERS: dict[str, tuple[FilterOp, ...]] = {
    "low": (filter_op("lowpass", f=_LOW_BAND_CUTOFF_HZ),),
    "mid": (filter_op("highpass", f=_LOW_BAND_CUTOFF_HZ), filter_op("lowpass", f=_HIGH_BAND_CUTOFF_HZ)),
    "high": (filter_op("highpass", f=_HIGH_BAND_CUTOFF_HZ),),
    "full": (),
}


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


@dataclass(frozen=True, slots=True)
class SpectralProfile:
    """Mean band energies plus full-band peak, all in dBFS."""

    low_mean_db: float
    mid_mean_db: float
    high_mean_db: float
    full_mean_db: float
    full_peak_db: float

    def to_dict(self) -> dict[str, float | None]:
        return {
            "lowMeanDb": _finite_or_none(self.low_mean_db),
            "midMeanDb": _finite_or_none(self.mid_mean_db),
            "highMeanDb": _finite_or_none(self.high_mean_db),
            "fullMeanDb": _finite_or_none(self.full_mean_db),
            "fullPeakDb": _finite_or_none(self.full_peak_db),
        }


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Spectral profile and the tags derived from it."""

    profile: SpectralProfile
    tags: tuple[Tag, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"profile": self.profile.to_dict(), "tags": [tag.value for tag in self.tags]}


def _difference(left: float, right: float) -> float | None:
    if not (math.isfinite(left) and math.isfinite(right)):
        return None
    return left - right


def classify_profile(profile: SpectralProfile) -> tuple[Tag, ...]:
    """Map a profile to tags; a rule whose inputs are not finite never fires."""

    tags: set[Tag] = set()

    low_vs_mid = _difference(profile.low_mean_db, profile.mid_mean_db)
    if low_vs_mid is not None:
        if low_vs_mid < _LOW_END_WEAK_BELOW_DB:
            tags.add(Tag.LOW_END_WEAK)
        elif low_vs_mid > _LOW_END_HEAVY_ABOVE_DB:
            tags.add(Tag.LOW_END_HEAVY)

    high_vs_mid = _difference(profile.high_mean_db, profile.mid_mean_db)
    if high_vs_mid is not None:
        if high_vs_mid > _HARSH_HIGHS_ABOVE_DB:
            tags.add(Tag.HARSH_HIGHS)
        elif high_vs_mid < _DULL_HIGHS_BELOW_DB:
            tags.add(Tag.DULL_HIGHS)

    mid_vs_full = _difference(profile.mid_mean_db, profile.full_mean_db)
    if mid_vs_full is not None and mid_vs_full > _MID_FORWARD_ABOVE_DB:
        tags.add(Tag.MID_FORWARD)

    if math.isfinite(profile.full_peak_db) and profile.full_peak_db > _TOO_LOUD_PEAK_ABOVE_DB:
        tags.add(Tag.TOO_LOUD)
    if math.isfinite(profile.full_mean_db) and profile.full_mean_db < _TOO_QUIET_MEAN_BELOW_DB:
        tags.add(Tag.TOO_QUIET)

    return tuple(tag for tag in TAG_ORDER if tag in tags)


@dataclass(frozen=True, slots=True)
class MeasurementAdapter:
    """Measure mean/peak level of a decoded file through an engine filter chain."""

    engine: DspEngine

    def measure_band(self, source: Path, band_filters: Sequence[FilterOp]) -> VolumeStats:
        output = self.engine.measure(source, [*band_filters, filter_op("volumedetect")])
        return parse_volume_stats(output)


@dataclass(frozen=True, slots=True)
class SpectralBandAnalyzer:
    """Run the four band measurements and classify the resulting profile.

    Engine failures are not caught here; they fail the analysis stage.
    """

    adapter: MeasurementAdapter

    def measure_profile(self, decoded: Path) -> SpectralProfile:
        stats = {band: self.adapter.measure_band(decoded, filters) for band, filters in BAND_FILTERS.items()}
        return SpectralProfile(
            low_mean_db=stats["low"].mean_db,
            mid_mean_db=stats["mid"].mean_db,
            high_mean_db=stats["high"].mean_db,
            full_mean_db=stats["full"].mean_db,
            full_peak_db=stats["full"].max_db,
        )

    def analyze(self, decoded: Path) -> AnalysisResult:
        profile = self.measure_profile(decoded)
        return AnalysisResult(profile=profile, tags=classify_profile(profile))
