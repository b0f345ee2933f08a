"""Two-pass loudness normalization through the DSP engine.

Pass one runs the engine's loudness filter in analysis-only mode with the target
parameters and captures its JSON report. Pass two runs the same filter in linear
correction mode with the target *and* every measured figure from pass one, so
the correction is a single static gain that respects the true-peak ceiling.

Targets are named presets (see :mod:`audo_enhance.domain.policies`); ``master``
renders use the selected platform profile and ``mix``/``4d`` renders use the
softer safety target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .application.ports import DspEngine
from .domain.policies import LoudnessTarget
from .filtergraph import FilterOp, filter_op
from .measurement import LoudnessMeasurement, parse_loudness_report

logger = logging.getLogger(__name__)


def build_measure_op(target: LoudnessTarget) -> FilterOp:
    """Loudness filter configured for the analysis-only pass."""

    return filter_op(
        "loudnorm",
        I=target.integrated_lufs,
        TP=target.true_peak_dbtp,
        LRA=target.loudness_range_lu,
        print_format="json",
    )


def build_target_op(target: LoudnessTarget) -> FilterOp:
    """Loudness filter as listed in a render plan, before measurements exist."""

    return filter_op(
        "loudnorm",
        I=target.integrated_lufs,
        TP=target.true_peak_dbtp,
        LRA=target.loudness_range_lu,
    )


def build_apply_op(target: LoudnessTarget, measurement: LoudnessMeasurement) -> FilterOp:
    """Loudness filter for the linear apply pass, embedding every measured figure."""

    return filter_op(
        "loudnorm",
        I=target.integrated_lufs,
        TP=target.true_peak_dbtp,
        LRA=target.loudness_range_lu,
        measured_I=measurement.input_i,
        measured_TP=measurement.input_tp,
        measured_LRA=measurement.input_lra,
        measured_thresh=measurement.input_thresh,
        offset=measurement.target_offset,
        linear=True,
        print_format="summary",
    )


@dataclass(frozen=True, slots=True)
class LoudnessNormalizer:
    """Measure-then-apply loudness protocol."""

    engine: DspEngine

    def measure(self, source: Path, target: LoudnessTarget) -> LoudnessMeasurement:
        report = self.engine.measure(source, [build_measure_op(target)])
        measurement = parse_loudness_report(report)
        logger.info(
            "Loudness measured",
            extra={
                "source": source.as_posix(),
                "measured_i": measurement.input_i,
                "measured_tp": measurement.input_tp,
                "target_i": target.integrated_lufs,
            },
        )
        return measurement

    def apply(
        self,
        source: Path,
        destination: Path,
        target: LoudnessTarget,
        measurement: LoudnessMeasurement,
        trailing_ops: Sequence[FilterOp] = (),
    ) -> None:
        self.engine.render(source, destination, [build_apply_op(target, measurement), *trailing_ops])

    def normalize(
        self,
        source: Path,
        destination: Path,
        target: LoudnessTarget,
        trailing_ops: Sequence[FilterOp] = (),
    ) -> LoudnessMeasurement:
        """Run both passes and return the first-pass measurement."""

        measurement = self.measure(source, target)
        self.apply(source, destination, target, measurement, trailing_ops=trailing_ops)
        return measurement
