# src/rehabcoach/geometry/angles.py
from typing import Sequence, Tuple
import math
import numpy as np

from ..data_models import Landmark
from .landmarks import PoseLandmark

# --- CONSTANTS ---
EPS = 1e-6

# --- TYPE ALIASES ---
Point = Tuple[float, float]
Frame = Sequence[Landmark]


# --- UTILITY FUNCTIONS ---

def xy(frame: Frame, idx: int) -> Point:
    """(x, y) of landmark `idx` in normalized image coordinates."""
    lm = frame[idx]
    return (float(lm.x), float(lm.y))


def midpoint(a: Point, b: Point) -> Point:
    """Compute midpoint between two 2D points."""
    return ((a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0)


def distance(a: Point, b: Point) -> float:
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def calculate_angle(a: Point, b: Point, c: Point) -> float:
    """
    Angle (degrees) at vertex B between B->A and B->C.

    Uses the difference of the two atan2 headings, so it is defined for
    every input (degenerate vectors give 0 rather than NaN). The result is
    folded into [0, 180].
    """
    radians = math.atan2(c[1] - b[1], c[0] - b[0]) - math.atan2(a[1] - b[1], a[0] - b[0])
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def joint_angle(frame: Frame, a: int, b: int, c: int) -> float:
    """calculate_angle over landmark indices, B being the joint."""
    return calculate_angle(xy(frame, a), xy(frame, b), xy(frame, c))


def lean_from_vertical(top: Point, bottom: Point) -> float:
    """Angle (degrees) between the bottom->top segment and image-up."""
    dx = top[0] - bottom[0]
    dy = top[1] - bottom[1]
    return abs(math.degrees(math.atan2(dx, -dy)))


# --- DERIVED BODY POINTS ---

def shoulder_center(frame: Frame) -> Point:
    return midpoint(xy(frame, PoseLandmark.LEFT_SHOULDER), xy(frame, PoseLandmark.RIGHT_SHOULDER))


def hip_center(frame: Frame) -> Point:
    return midpoint(xy(frame, PoseLandmark.LEFT_HIP), xy(frame, PoseLandmark.RIGHT_HIP))


def trunk_angle(frame: Frame) -> float:
    """Torso lean: mid-shoulder relative to mid-hip, 0 when upright."""
    return lean_from_vertical(shoulder_center(frame), hip_center(frame))


def horizontal_spread(frame: Frame, left: int, right: int) -> float:
    return abs(frame[left].x - frame[right].x)


# --- BILATERAL JOINT ANGLES ---

def knee_angles(frame: Frame) -> Tuple[float, float]:
    """(left, right) hip-knee-ankle angles; 180 is a straight leg."""
    left = joint_angle(frame, PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE)
    right = joint_angle(frame, PoseLandmark.RIGHT_HIP, PoseLandmark.RIGHT_KNEE, PoseLandmark.RIGHT_ANKLE)
    return left, right


def elbow_angles(frame: Frame) -> Tuple[float, float]:
    """(left, right) shoulder-elbow-wrist angles; 180 is a locked-out arm."""
    left = joint_angle(frame, PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST)
    right = joint_angle(frame, PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_WRIST)
    return left, right


def elbow_flare_angles(frame: Frame) -> Tuple[float, float]:
    """(left, right) upper-arm to torso angles (elbow-shoulder-hip)."""
    left = joint_angle(frame, PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_HIP)
    right = joint_angle(frame, PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_HIP)
    return left, right
