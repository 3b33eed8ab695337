# src/rehabcoach/activities/deadlift.py

from __future__ import annotations
from typing import List, Optional

from ..analysis.rep_counter import hysteresis_step
from ..analysis.view_classifier import GatedCheck
from ..config import MSG_HIPS_UNEVEN, MSG_KNEES_TOO_BENT, EngineConfig
from ..data_models import CalibrationData, CountingState, ExerciseType, ViewBucket
from ..geometry.angles import EPS, Frame, horizontal_spread, trunk_angle
from ..geometry.landmarks import PoseLandmark
from ..metrics.depth import clamp_percent
from .base import ExerciseReading, ExerciseStrategy


def active_leg_is_left(frame: Frame) -> bool:
    """Pick the leg the pose source is more confident about; left on a tie or without visibility."""
    def leg_visibility(idxs) -> float:
        return sum(frame[i].visibility if frame[i].visibility is not None else 1.0 for i in idxs)

    left = leg_visibility((PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE))
    right = leg_visibility((PoseLandmark.RIGHT_HIP, PoseLandmark.RIGHT_KNEE, PoseLandmark.RIGHT_ANKLE))
    return left >= right


class DeadliftStrategy(ExerciseStrategy):
    """
    Hip hinge measured as trunk lean from vertical; rests standing (UP).

    Range of motion reads 0 upright and 100 at a horizontal torso.
    """

    exercise = ExerciseType.DEADLIFT

    def __init__(self, config: Optional[EngineConfig] = None):
        super().__init__(config)
        t = self.config.deadlift
        self.knee_bend = GatedCheck(
            MSG_KNEES_TOO_BENT,
            {ViewBucket.SIDE: t.knee_bend_side, ViewBucket.OBLIQUE: t.knee_bend_oblique},
            fires_above=False,
        )
        self.hip_tilt = GatedCheck(
            MSG_HIPS_UNEVEN,
            {ViewBucket.FRONT: t.hip_tilt_front, ViewBucket.OBLIQUE: t.hip_tilt_oblique},
        )

    def derive_metrics(self, frame: Frame, calibration: Optional[CalibrationData]) -> ExerciseReading:
        t = self.config.deadlift
        hinge = trunk_angle(frame)
        label = "HINGE" if hinge > t.hinging_trunk else "STANDING"
        return self._reading(
            frame,
            depth=clamp_percent(hinge / t.full_hinge * 100.0),
            phase_value=hinge,
            action_label=label,
        )

    def check_thresholds(self, reading: ExerciseReading, current: CountingState) -> CountingState:
        t = self.config.deadlift
        return hysteresis_step(
            current,
            enters_active=reading.phase_value > t.enter_trunk,
            back_at_rest=reading.phase_value < t.exit_trunk,
        )

    def form_checks(self, frame: Frame, reading: ExerciseReading, view: ViewBucket) -> List[str]:
        if reading.phase_value <= self.config.deadlift.hinging_trunk:
            return []
        messages: List[str] = []

        knee = reading.knee_left if active_leg_is_left(frame) else reading.knee_right
        if self.knee_bend.evaluate(knee, view):
            messages.append(self.knee_bend.message)

        hip_width = horizontal_spread(frame, PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP)
        if hip_width > EPS:
            tilt = abs(frame[PoseLandmark.LEFT_HIP].y - frame[PoseLandmark.RIGHT_HIP].y) / hip_width
            if self.hip_tilt.evaluate(tilt, view):
                messages.append(self.hip_tilt.message)
        return messages
