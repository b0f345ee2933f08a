"""Domain value objects representing stable loudness policies."""

from __future__ import annotations

from dataclasses import dataclass

from audo_enhance.enhancement_options import MasterProfile


@dataclass(frozen=True, slots=True)
class LoudnessTarget:
    """Integrated loudness (LUFS), true-peak ceiling (dBTP) and loudness range (LU)."""

    integrated_lufs: float
    true_peak_dbtp: float
    loudness_range_lu: float

    def to_dict(self) -> dict[str, float]:
        return {
            "integratedLufs": self.integrated_lufs,
            "truePeakDbtp": self.true_peak_dbtp,
            "loudnessRangeLu": self.loudness_range_lu,
        }


STREAMING_TARGET = LoudnessTarget(integrated_lufs=-14.0, true_peak_dbtp=-1.0, loudness_range_lu=10.0)

MASTER_TARGETS: dict[MasterProfile, LoudnessTarget] = {
    MasterProfile.SPOTIFY: STREAMING_TARGET,
    MasterProfile.STREAMING: STREAMING_TARGET,
    MasterProfile.APPLE_MUSIC: LoudnessTarget(integrated_lufs=-16.0, true_peak_dbtp=-1.0, loudness_range_lu=11.0),
    MasterProfile.SOUNDCLOUD: LoudnessTarget(integrated_lufs=-13.0, true_peak_dbtp=-1.0, loudness_range_lu=10.0),
    MasterProfile.LOUD: LoudnessTarget(integrated_lufs=-10.0, true_peak_dbtp=-0.8, loudness_range_lu=8.0),
}

# Softer target for mix/4d renders: keeps creative dynamics, still prevents clipping.
MIX_SAFETY_TARGET = LoudnessTarget(integrated_lufs=-16.0, true_peak_dbtp=-1.2, loudness_range_lu=12.0)


def resolve_master_target(profile: MasterProfile | str | None) -> LoudnessTarget:
    """Resolve a named profile, falling back to the streaming default."""

    if isinstance(profile, MasterProfile):
        return MASTER_TARGETS[profile]
    if profile is None:
        return STREAMING_TARGET
    try:
        return MASTER_TARGETS[MasterProfile(profile.strip().lower())]
    except ValueError:
        return STREAMING_TARGET
