# src/rehabcoach/activities/bench.py

from __future__ import annotations
from typing import List, Optional

import numpy as np

from ..analysis.rep_counter import hysteresis_step
from ..analysis.view_classifier import GatedCheck
from ..config import MSG_ELBOWS_FLARED, MSG_UNEVEN_PUSH, EngineConfig
from ..data_models import CalibrationData, CountingState, ExerciseType, ViewBucket
from ..geometry.angles import Frame, elbow_angles, elbow_flare_angles
from ..metrics.depth import clamp_percent
from .base import ExerciseReading, ExerciseStrategy


class BenchStrategy(ExerciseStrategy):
    """Mean elbow angle drives the cycle; rests locked out (UP)."""

    exercise = ExerciseType.BENCH

    def __init__(self, config: Optional[EngineConfig] = None):
        super().__init__(config)
        t = self.config.bench
        # one arm hides the other side-on, so neither check runs from SIDE
        self.asymmetry = GatedCheck(
            MSG_UNEVEN_PUSH,
            {ViewBucket.FRONT: t.asymmetry_front, ViewBucket.OBLIQUE: t.asymmetry_oblique},
        )
        self.flare = GatedCheck(MSG_ELBOWS_FLARED, {ViewBucket.FRONT: t.flare_front})

    def derive_metrics(self, frame: Frame, calibration: Optional[CalibrationData]) -> ExerciseReading:
        t = self.config.bench
        left, right = elbow_angles(frame)
        mean_elbow = float(np.mean([left, right]))
        depth = clamp_percent((t.lockout_elbow - mean_elbow) / (t.lockout_elbow - t.bottom_elbow) * 100.0)
        label = "LOCKED OUT" if mean_elbow >= t.exit_elbow else "PRESSING"
        return self._reading(frame, depth=depth, phase_value=mean_elbow, action_label=label)

    def check_thresholds(self, reading: ExerciseReading, current: CountingState) -> CountingState:
        t = self.config.bench
        return hysteresis_step(
            current,
            enters_active=reading.phase_value < t.enter_elbow,
            back_at_rest=reading.phase_value > t.exit_elbow,
        )

    def form_checks(self, frame: Frame, reading: ExerciseReading, view: ViewBucket) -> List[str]:
        if reading.phase_value >= self.config.bench.exit_elbow:
            return []
        messages: List[str] = []
        if self.asymmetry.evaluate(abs(reading.elbow_left - reading.elbow_right), view):
            messages.append(self.asymmetry.message)
        if self.flare.evaluate(max(elbow_flare_angles(frame)), view):
            messages.append(self.flare.message)
        return messages
