# src/rehabcoach/metrics/depth.py
from typing import Optional
import numpy as np

from ..config import CALIBRATION_EPS, DEFAULT_DEPTH_ANCHOR
from ..data_models import CalibrationData
from ..geometry.angles import Frame
from ..geometry.landmarks import PoseLandmark


def raw_depth_diff(frame: Frame) -> float:
    """
    Mean knee-Y minus mean hip-Y.

    Image Y grows downward, so the value is large when standing (knees well
    below hips) and shrinks toward 0 as the hips drop to knee height.
    """
    hip_y = (frame[PoseLandmark.LEFT_HIP].y + frame[PoseLandmark.RIGHT_HIP].y) / 2.0
    knee_y = (frame[PoseLandmark.LEFT_KNEE].y + frame[PoseLandmark.RIGHT_KNEE].y) / 2.0
    return float(knee_y - hip_y)


def clamp_percent(value: float) -> float:
    return float(np.clip(value, 0.0, 100.0))


def depth_percent(
    diff: float,
    calibration: Optional[CalibrationData] = None,
    anchor: float = DEFAULT_DEPTH_ANCHOR,
    eps: float = CALIBRATION_EPS,
) -> float:
    """
    Map a raw diff onto 0..100.

    Calibrated: standing anchor -> 0, squat anchor -> 100. A range narrower
    than `eps` is treated as unusable and reads 0.
    Uncalibrated: linear from `anchor` (0 %) down to a diff of 0 (100 %).
    """
    if calibration is not None:
        span = calibration.span
        if abs(span) <= eps:
            return 0.0
        return clamp_percent((diff - calibration.standing_diff) / span * 100.0)
    return clamp_percent((anchor - diff) * (100.0 / anchor))


def is_inverted(calibration: CalibrationData) -> bool:
    """True when the squat anchor is not shallower-diff than standing (knees should rise toward hips)."""
    return calibration.squat_diff >= calibration.standing_diff
