# src/rehabcoach/analysis/view_classifier.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional

from ..config import ViewThresholds
from ..data_models import ViewBucket
from ..geometry.angles import EPS, Frame, distance, hip_center, horizontal_spread, shoulder_center
from ..geometry.landmarks import PoseLandmark


def body_width_ratio(frame: Frame) -> Optional[float]:
    """
    Mean of shoulder and hip horizontal spread divided by torso length.

    Facing the camera both girdles are wide; side-on they collapse to
    nearly a point while the torso keeps its length. None when the torso
    itself is degenerate.
    """
    torso = distance(shoulder_center(frame), hip_center(frame))
    if torso < EPS:
        return None
    shoulders = horizontal_spread(frame, PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER)
    hips = horizontal_spread(frame, PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP)
    return ((shoulders + hips) / 2.0) / torso


def classify_view(frame: Frame, thresholds: ViewThresholds = ViewThresholds()) -> ViewBucket:
    ratio = body_width_ratio(frame)
    if ratio is None:
        return ViewBucket.OBLIQUE
    if ratio >= thresholds.front_min_ratio:
        return ViewBucket.FRONT
    if ratio <= thresholds.side_max_ratio:
        return ViewBucket.SIDE
    return ViewBucket.OBLIQUE


@dataclass(frozen=True)
class GatedCheck:
    """
    A form check that is only trusted from some camera views.

    `limits` maps a view bucket to the threshold used there; a bucket that
    is absent suppresses the check. When `fires_above` is True the message
    is raised for values above the limit, otherwise for values below it.
    """
    message: str
    limits: Mapping[ViewBucket, float]
    fires_above: bool = True

    def limit_for(self, view: ViewBucket) -> Optional[float]:
        return self.limits.get(view)

    def evaluate(self, value: float, view: ViewBucket) -> bool:
        limit = self.limit_for(view)
        if limit is None:
            return False
        return value > limit if self.fires_above else value < limit
