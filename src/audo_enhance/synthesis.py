"""Mapping tags and listener intent into an ordered render plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from .analysis import TAG_ORDER, Tag
from .audio_contract import CANONICAL_CHANNEL_LAYOUT, CANONICAL_SAMPLE_FORMAT, CANONICAL_SAMPLE_RATE_HZ
from .domain.policies import MIX_SAFETY_TARGET, LoudnessTarget, resolve_master_target
from .enhancement_options import EnhancementType, Focus, MasterProfile
from .filtergraph import FilterOp, filter_op, serialize_filter_chain
from .normalization import build_target_op


class RenderStage(str, Enum):
    """Plan partitions, declared in render order."""

    PRE_GAIN = "pre_gain"
    CORE = "core"
    ADAPTIVE_TONE = "adaptive_tone"
    FOCUS = "focus"
    TEMPO_PITCH = "tempo_pitch"
    LOUDNESS = "loudness"
    LIMITER = "limiter"


STAGE_ORDER: tuple[RenderStage, ...] = tuple(RenderStage)

_PRE_GAIN_DB = -3.0

PRE_GAIN_OP = filter_op("volume", volume=f"{_PRE_GAIN_DB:g}dB")

CORE_CHAINS: dict[EnhancementType, tuple[FilterOp, ...]] = {
    EnhancementType.MIX: (
        filter_op("highpass", f=30),
        filter_op("lowpass", f=18_000),
        filter_op("acompressor", threshold="-18dB", ratio=3, attack=20, release=120, makeup=2),
        filter_op("stereotools", mlev=1, slev=1.1),
    ),
    EnhancementType.FOUR_D: (
        filter_op("highpass", f=30),
        filter_op("lowpass", f=18_000),
        filter_op("stereotools", mlev=1, slev=1.25),
        filter_op("apulsator", hz=0.12, amount=0.35),
        filter_op("aecho", in_gain=0.8, out_gain=0.7, delays=40, decays=0.25),
    ),
    EnhancementType.MASTER: (
        filter_op("highpass", f=25),
        filter_op("lowpass", f=20_000),
        filter_op("acompressor", threshold="-20dB", ratio=2, attack=10, release=100, makeup=2),
    ),
}

TONE_CORRECTIONS: dict[Tag, tuple[FilterOp, ...]] = {
    Tag.LOW_END_WEAK: (filter_op("bass", g=2.5, f=100, w=0.7),),
    Tag.LOW_END_HEAVY: (
        filter_op("bass", g=-2.5, f=100, w=0.7),
        filter_op("equalizer", f=250, t="q", w=1.2, g=-2),
    ),
    Tag.HARSH_HIGHS: (
        filter_op("treble", g=-2, f=7_000, w=0.6),
        filter_op("equalizer", f=3_500, t="q", w=1.5, g=-1.5),
    ),
    Tag.DULL_HIGHS: (filter_op("treble", g=2.5, f=9_000, w=0.6),),
    Tag.MID_FORWARD: (filter_op("equalizer", f=1_200, t="q", w=1, g=-1.5),),
}

FOCUS_CORRECTIONS: dict[Focus, tuple[FilterOp, ...]] = {
    Focus.NONE: (),
    Focus.BASS: (filter_op("equalizer", f=90, t="q", w=1, g=2),),
    Focus.PRESENCE: (filter_op("equalizer", f=3_500, t="q", w=1, g=2),),
    Focus.AIR: (filter_op("equalizer", f=12_000, t="q", w=1, g=2),),
    Focus.WIDE: (filter_op("stereotools", mlev=1, slev=1.2),),
    Focus.PUNCH: (
        filter_op("acompressor", threshold="-16dB", ratio=2.5, attack=8, release=80, makeup=2),
        filter_op("equalizer", f=100, t="q", w=1, g=1),
    ),
}

FINAL_LIMITERS: dict[EnhancementType, FilterOp] = {
    EnhancementType.MIX: filter_op("alimiter", limit=0.99, attack=5, release=80, level=False),
    EnhancementType.FOUR_D: filter_op("alimiter", limit=0.98, attack=5, release=80, level=False),
    EnhancementType.MASTER: filter_op("alimiter", limit=0.98, attack=5, release=80, level=False),
}


@dataclass(frozen=True, slots=True)
class PlannedOp:
    """A filter operation tagged with the plan stage it belongs to."""

    stage: RenderStage
    op: FilterOp

    def to_dict(self) -> dict[str, Any]:
        return {"stage": self.stage.value, **self.op.to_dict()}


@dataclass(frozen=True, slots=True)
class RenderPlan:
    """Immutable, ordered processing plan for one job."""

    steps: tuple[PlannedOp, ...]
    loudness_target: LoudnessTarget
    actions: Mapping[str, Any] = field(default_factory=dict)

    def ops(self, stages: Iterable[RenderStage] | None = None) -> tuple[FilterOp, ...]:
        if stages is None:
            return tuple(step.op for step in self.steps)
        wanted = frozenset(stages)
        return tuple(step.op for step in self.steps if step.stage in wanted)

    def stage_sequence(self) -> tuple[RenderStage, ...]:
        """Distinct stages in the order they appear."""

        sequence: list[RenderStage] = []
        for step in self.steps:
            if not sequence or sequence[-1] is not step.stage:
                sequence.append(step.stage)
        return tuple(sequence)

    def prepass_ops(self) -> tuple[FilterOp, ...]:
        """Operations rendered before loudness normalization."""

        return self.ops(stage for stage in STAGE_ORDER if stage not in {RenderStage.LOUDNESS, RenderStage.LIMITER})

    def limiter_ops(self) -> tuple[FilterOp, ...]:
        return self.ops([RenderStage.LIMITER])

    def filtergraph(self) -> str:
        return serialize_filter_chain(self.ops())

    def to_dict(self) -> dict[str, Any]:
        return {
            "actions": dict(self.actions),
            "steps": [step.to_dict() for step in self.steps],
            "filtergraph": self.filtergraph(),
        }


def tempo_pitch_ops(speed_multiplier: float, pitch_semitones: float) -> tuple[FilterOp, ...]:
    """Stabilize the rate, scale tempo, then shift pitch with tempo compensation.

    Pitch is shifted by resampling at ``rate * 2**(semitones/12)`` and
    restabilizing, which also speeds the audio up by the shifted/reference rate
    ratio; the trailing tempo factor is the exact inverse of that ratio.
    """

    if speed_multiplier <= 0:
        raise ValueError("speed_multiplier must be positive.")

    ops = [
        filter_op("aresample", osr=CANONICAL_SAMPLE_RATE_HZ, resampler="soxr"),
        filter_op("aformat", sample_fmts=CANONICAL_SAMPLE_FORMAT, channel_layouts=CANONICAL_CHANNEL_LAYOUT),
        filter_op("atempo", tempo=float(speed_multiplier)),
    ]
    if not pitch_semitones:
        return tuple(ops)

    shifted_rate_hz = round(CANONICAL_SAMPLE_RATE_HZ * 2.0 ** (pitch_semitones / 12.0))
    ops.extend(
        [
            filter_op("asetrate", r=shifted_rate_hz),
            filter_op("aresample", osr=CANONICAL_SAMPLE_RATE_HZ),
            filter_op("atempo", tempo=CANONICAL_SAMPLE_RATE_HZ / shifted_rate_hz),
        ]
    )
    return tuple(ops)


def net_tempo_factor(ops: Iterable[FilterOp]) -> float:
    """Playback-speed factor of a chain; output duration is input duration / factor."""

    factor = 1.0
    rate_hz = float(CANONICAL_SAMPLE_RATE_HZ)
    for op in ops:
        if op.name == "atempo":
            factor *= float(op.param("tempo"))
        elif op.name == "asetrate":
            shifted = float(op.param("r"))
            factor *= shifted / rate_hz
            rate_hz = shifted
        elif op.name == "aresample":
            rate_hz = float(op.param("osr"))
    return factor


def _loudness_target_for(mode: EnhancementType, master_profile: MasterProfile | str | None) -> LoudnessTarget:
    if mode is EnhancementType.MASTER:
        return resolve_master_target(master_profile)
    return MIX_SAFETY_TARGET


def synthesize_render_plan(
    tags: Iterable[Tag],
    mode: EnhancementType,
    focus: Focus = Focus.NONE,
    speed_multiplier: float = 1.0,
    pitch_semitones: float = 0.0,
    master_profile: MasterProfile | str | None = MasterProfile.STREAMING,
) -> RenderPlan:
    """Build the render plan: pre-gain, core, tone, focus, tempo/pitch, loudness, limiter."""

    tag_set = frozenset(tags)
    ordered_tags = tuple(tag for tag in TAG_ORDER if tag in tag_set)
    loudness_target = _loudness_target_for(mode, master_profile)

    steps: list[PlannedOp] = []

    def _add(stage: RenderStage, ops: Iterable[FilterOp]) -> None:
        steps.extend(PlannedOp(stage=stage, op=op) for op in ops)

    pre_gain = Tag.TOO_LOUD in tag_set
    if pre_gain:
        _add(RenderStage.PRE_GAIN, (PRE_GAIN_OP,))

    _add(RenderStage.CORE, CORE_CHAINS[mode])

    tone_corrections = [tag for tag in ordered_tags if tag in TONE_CORRECTIONS]
    for tag in tone_corrections:
        _add(RenderStage.ADAPTIVE_TONE, TONE_CORRECTIONS[tag])

    _add(RenderStage.FOCUS, FOCUS_CORRECTIONS[focus])
    _add(RenderStage.TEMPO_PITCH, tempo_pitch_ops(speed_multiplier, pitch_semitones))

    if mode is EnhancementType.MASTER:
        _add(RenderStage.LOUDNESS, (build_target_op(loudness_target),))

    _add(RenderStage.LIMITER, (FINAL_LIMITERS[mode],))

    profile_value = master_profile.value if isinstance(master_profile, MasterProfile) else master_profile
    actions = {
        "mode": mode.value,
        "masterProfile": profile_value if mode is EnhancementType.MASTER else None,
        "focus": focus.value,
        "speedMultiplier": float(speed_multiplier),
        "pitchSemitones": float(pitch_semitones),
        "tags": tuple(tag.value for tag in ordered_tags),
        "preGain": pre_gain,
        "toneCorrections": tuple(tag.value for tag in tone_corrections),
        "loudnessTarget": loudness_target.to_dict(),
    }
    return RenderPlan(steps=tuple(steps), loudness_target=loudness_target, actions=MappingProxyType(actions))
