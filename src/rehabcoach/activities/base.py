# src/rehabcoach/activities/base.py

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..data_models import CalibrationData, CountingState, ExerciseType, ViewBucket
from ..geometry.angles import Frame, elbow_angles, knee_angles, trunk_angle
from ..metrics.depth import raw_depth_diff


@dataclass(frozen=True)
class ExerciseReading:
    """Per-frame geometry an exercise derives before thresholds and form checks run."""
    knee_left: float
    knee_right: float
    elbow_left: float
    elbow_right: float
    trunk_angle: float
    raw_diff: float
    depth: float            # 0..100 range of motion for this exercise
    phase_value: float      # quantity the rep thresholds are applied to
    action_label: str


class ExerciseStrategy(ABC):
    """
    One exercise's view of a frame.

    derive_metrics -> check_thresholds -> form_checks is the whole
    contract; the rep cycle, session bookkeeping and throttling are shared
    and live in the engine.
    """

    exercise: ExerciseType
    uses_calibration: bool = False

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_ENGINE_CONFIG

    @abstractmethod
    def derive_metrics(self, frame: Frame, calibration: Optional[CalibrationData]) -> ExerciseReading:
        ...

    @abstractmethod
    def check_thresholds(self, reading: ExerciseReading, current: CountingState) -> CountingState:
        ...

    @abstractmethod
    def form_checks(self, frame: Frame, reading: ExerciseReading, view: ViewBucket) -> List[str]:
        ...

    def _reading(self, frame: Frame, depth: float, phase_value: float, action_label: str) -> ExerciseReading:
        knee_l, knee_r = knee_angles(frame)
        elbow_l, elbow_r = elbow_angles(frame)
        return ExerciseReading(
            knee_left=knee_l,
            knee_right=knee_r,
            elbow_left=elbow_l,
            elbow_right=elbow_r,
            trunk_angle=trunk_angle(frame),
            raw_diff=raw_depth_diff(frame),
            depth=depth,
            phase_value=phase_value,
            action_label=action_label,
        )
