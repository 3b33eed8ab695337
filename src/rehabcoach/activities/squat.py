# src/rehabcoach/activities/squat.py

from __future__ import annotations
from typing import List, Optional

from ..analysis.rep_counter import hysteresis_step
from ..analysis.view_classifier import GatedCheck
from ..config import MSG_CHEST_FORWARD, MSG_KNEES_INWARD, EngineConfig
from ..data_models import CalibrationData, CountingState, ExerciseType, ViewBucket
from ..geometry.angles import EPS, Frame, horizontal_spread
from ..geometry.landmarks import PoseLandmark
from ..metrics.depth import depth_percent, raw_depth_diff
from .base import ExerciseReading, ExerciseStrategy


class SquatStrategy(ExerciseStrategy):
    """Depth from the knee-hip vertical gap; rests standing (UP)."""

    exercise = ExerciseType.SQUAT
    uses_calibration = True

    def __init__(self, config: Optional[EngineConfig] = None):
        super().__init__(config)
        t = self.config.squat
        self.valgus = GatedCheck(MSG_KNEES_INWARD, {ViewBucket.FRONT: t.valgus_ratio_front}, fires_above=False)
        self.lean = GatedCheck(
            MSG_CHEST_FORWARD,
            {ViewBucket.SIDE: t.trunk_lean_side, ViewBucket.OBLIQUE: t.trunk_lean_oblique},
        )

    def derive_metrics(self, frame: Frame, calibration: Optional[CalibrationData]) -> ExerciseReading:
        diff = raw_depth_diff(frame)
        depth = depth_percent(
            diff,
            calibration,
            anchor=self.config.default_depth_anchor,
            eps=self.config.calibration_eps,
        )
        label = "SQUAT" if depth > self.config.squat.squatting_depth else "STANDING"
        return self._reading(frame, depth=depth, phase_value=depth, action_label=label)

    def check_thresholds(self, reading: ExerciseReading, current: CountingState) -> CountingState:
        t = self.config.squat
        return hysteresis_step(
            current,
            enters_active=reading.phase_value > t.enter_depth,
            back_at_rest=reading.phase_value < t.exit_depth,
        )

    def form_checks(self, frame: Frame, reading: ExerciseReading, view: ViewBucket) -> List[str]:
        if reading.depth <= self.config.squat.squatting_depth:
            return []
        messages: List[str] = []

        ankle_spread = horizontal_spread(frame, PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE)
        if ankle_spread > EPS:
            knee_spread = horizontal_spread(frame, PoseLandmark.LEFT_KNEE, PoseLandmark.RIGHT_KNEE)
            if self.valgus.evaluate(knee_spread / ankle_spread, view):
                messages.append(self.valgus.message)

        if self.lean.evaluate(reading.trunk_angle, view):
            messages.append(self.lean.message)
        return messages
