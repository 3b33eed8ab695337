# tests/conftest.py
# Synthetic pose frames. Coordinates are normalized image units with Y
# growing downward, like the live pose stream.

import math
from typing import List

import pytest

from rehabcoach.data_models import Landmark
from rehabcoach.geometry.landmarks import NUM_LANDMARKS, PoseLandmark as P


def blank_frame() -> List[Landmark]:
    return [Landmark(x=0.5, y=0.5, z=0.0, visibility=0.9) for _ in range(NUM_LANDMARKS)]


def _put(frame, idx, x, y):
    frame[idx] = Landmark(x=x, y=y, z=0.0, visibility=0.9)


def build_squat_frame(depth: float = 0.0, knees_in: bool = False) -> List[Landmark]:
    """
    Front-facing squatter whose uncalibrated depth reads `depth` percent.

    knee-Y minus hip-Y is 0.3 standing and 0 at full depth.
    """
    frame = blank_frame()
    diff = 0.3 - depth * 0.003
    _put(frame, P.LEFT_SHOULDER, 0.40, 0.25)
    _put(frame, P.RIGHT_SHOULDER, 0.60, 0.25)
    _put(frame, P.LEFT_ELBOW, 0.38, 0.38)
    _put(frame, P.RIGHT_ELBOW, 0.62, 0.38)
    _put(frame, P.LEFT_WRIST, 0.38, 0.50)
    _put(frame, P.RIGHT_WRIST, 0.62, 0.50)
    _put(frame, P.LEFT_HIP, 0.42, 0.50)
    _put(frame, P.RIGHT_HIP, 0.58, 0.50)
    knee_x = (0.47, 0.53) if knees_in else (0.42, 0.58)
    _put(frame, P.LEFT_KNEE, knee_x[0], 0.50 + diff)
    _put(frame, P.RIGHT_KNEE, knee_x[1], 0.50 + diff)
    _put(frame, P.LEFT_ANKLE, 0.42, 0.95)
    _put(frame, P.RIGHT_ANKLE, 0.58, 0.95)
    return frame


def build_bench_frame(left_elbow: float = 180.0, right_elbow: float = None, flared: bool = False) -> List[Landmark]:
    """Front view; each elbow angle is set exactly, upper arms hang along the torso unless flared."""
    right_elbow = left_elbow if right_elbow is None else right_elbow
    frame = blank_frame()
    _put(frame, P.LEFT_SHOULDER, 0.40, 0.30)
    _put(frame, P.RIGHT_SHOULDER, 0.60, 0.30)
    _put(frame, P.LEFT_HIP, 0.42, 0.60)
    _put(frame, P.RIGHT_HIP, 0.58, 0.60)
    _put(frame, P.LEFT_KNEE, 0.42, 0.80)
    _put(frame, P.RIGHT_KNEE, 0.58, 0.80)
    _put(frame, P.LEFT_ANKLE, 0.42, 0.95)
    _put(frame, P.RIGHT_ANKLE, 0.58, 0.95)

    if flared:
        # upper arms straight out sideways, forearms pointing up: both elbows at 90
        _put(frame, P.LEFT_ELBOW, 0.25, 0.30)
        _put(frame, P.RIGHT_ELBOW, 0.75, 0.30)
        _put(frame, P.LEFT_WRIST, 0.25, 0.15)
        _put(frame, P.RIGHT_WRIST, 0.75, 0.15)
        return frame

    for sx, sign, angle, elbow_idx, wrist_idx in (
        (0.40, -1.0, left_elbow, P.LEFT_ELBOW, P.LEFT_WRIST),
        (0.60, 1.0, right_elbow, P.RIGHT_ELBOW, P.RIGHT_WRIST),
    ):
        ex, ey = sx, 0.45
        theta = math.radians(angle)
        _put(frame, elbow_idx, ex, ey)
        _put(frame, wrist_idx, ex + sign * 0.15 * math.sin(theta), ey - 0.15 * math.cos(theta))
    return frame


def build_deadlift_frame(hinge: float = 0.0, bent_knees: bool = False, hip_drop: float = 0.0) -> List[Landmark]:
    """
    Side-on lifter with the torso leaning `hinge` degrees from vertical.

    `hip_drop` lowers the right hip to tilt the pelvis.
    """
    frame = blank_frame()
    hx, hy = 0.50, 0.55
    theta = math.radians(hinge)
    sx, sy = hx + 0.3 * math.sin(theta), hy - 0.3 * math.cos(theta)
    _put(frame, P.LEFT_SHOULDER, sx - 0.01, sy)
    _put(frame, P.RIGHT_SHOULDER, sx + 0.01, sy)
    _put(frame, P.LEFT_HIP, hx - 0.005, hy)
    _put(frame, P.RIGHT_HIP, hx + 0.005, hy + hip_drop)
    knee_x = hx + 0.1 if bent_knees else hx
    for knee, ankle in ((P.LEFT_KNEE, P.LEFT_ANKLE), (P.RIGHT_KNEE, P.RIGHT_ANKLE)):
        _put(frame, knee, knee_x, 0.75)
        _put(frame, ankle, hx, 0.95)
    _put(frame, P.LEFT_ELBOW, sx, sy + 0.15)
    _put(frame, P.RIGHT_ELBOW, sx, sy + 0.15)
    _put(frame, P.LEFT_WRIST, sx, sy + 0.3)
    _put(frame, P.RIGHT_WRIST, sx, sy + 0.3)
    return frame


@pytest.fixture
def squat_frame():
    return build_squat_frame


@pytest.fixture
def bench_frame():
    return build_bench_frame


@pytest.fixture
def deadlift_frame():
    return build_deadlift_frame


class StepClock:
    """Deterministic clock advancing a fixed step per call."""

    def __init__(self, step: float = 0.2, start: float = 1000.0):
        self.step = step
        self.now = start - step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def step_clock():
    return StepClock()
