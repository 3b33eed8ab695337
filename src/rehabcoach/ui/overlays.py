# src/rehabcoach/ui/overlays.py
# --------------------------------------------------------------------
# Drawing helpers for exported snapshots: the pose skeleton and the
# active feedback messages, rendered straight onto a BGR video frame.
# --------------------------------------------------------------------

from typing import Sequence
import numpy as np, cv2

from ..data_models import Landmark
from ..geometry.landmarks import POSE_CONNECTIONS

BONE_COLOR = (0, 255, 0)        # BGR green, matches the live HUD skeleton
JOINT_COLOR = (0, 0, 255)       # BGR red
FEEDBACK_COLOR = (60, 60, 255)


def _to_px(lm: Landmark, w: int, h: int):
    return int(lm.x * w), int(lm.y * h)


def draw_skeleton(frame: np.ndarray, landmarks: Sequence[Landmark]) -> np.ndarray:
    """Draw connections then joints in place; edges with a missing end are skipped."""
    h, w = frame.shape[:2]
    n = len(landmarks)
    for a, b in POSE_CONNECTIONS:
        if a < n and b < n:
            cv2.line(frame, _to_px(landmarks[a], w, h), _to_px(landmarks[b], w, h), BONE_COLOR, 2)
    for lm in landmarks:
        cv2.circle(frame, _to_px(lm, w, h), 3, JOINT_COLOR, -1)
    return frame


def draw_feedback(frame: np.ndarray, messages: Sequence[str]) -> np.ndarray:
    """Stack feedback messages in the top-left corner."""
    y = 28
    for msg in messages:
        cv2.putText(frame, msg, (12, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, FEEDBACK_COLOR, 2, cv2.LINE_AA)
        y += 28
    return frame


def compose_snapshot(frame_bgr: np.ndarray, landmarks: Sequence[Landmark], messages: Sequence[str] = ()) -> np.ndarray:
    """Copy of the video frame with skeleton and feedback painted on top."""
    out = frame_bgr.copy()
    draw_skeleton(out, landmarks)
    draw_feedback(out, messages)
    return out
