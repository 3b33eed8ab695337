# src/rehabcoach/data_models.py

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire (matches the browser JSON artifacts)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Enums ---

class ExerciseType(str, Enum):
    SQUAT = "SQUAT"
    BENCH = "BENCH"
    DEADLIFT = "DEADLIFT"


class CountingState(str, Enum):
    INIT = "INIT"
    UP = "UP"
    DOWN = "DOWN"


class RepQuality(str, Enum):
    GOOD = "GOOD"
    BAD = "BAD"


class CalibrationKind(str, Enum):
    STANDING = "STANDING"
    SQUAT = "SQUAT"


class ViewBucket(str, Enum):
    FRONT = "FRONT"
    SIDE = "SIDE"
    OBLIQUE = "OBLIQUE"


# --- Base Structures ---

class Landmark(BaseModel):
    """Normalized pose landmark (x/y in image units, z relative depth)."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None


LandmarkLike = Union[Landmark, Mapping[str, Any]]


def to_landmarks(raw: Sequence[LandmarkLike]) -> List[Landmark]:
    """Accept Landmark objects or plain {x, y, z, visibility} mappings."""
    return [lm if isinstance(lm, Landmark) else Landmark.model_validate(lm) for lm in raw]


class CalibrationData(_CamelModel):
    model_config = ConfigDict(frozen=True)

    standing_diff: float
    squat_diff: float

    @property
    def span(self) -> float:
        return self.squat_diff - self.standing_diff


# --- Session Models ---

class RepRecord(_CamelModel):
    model_config = ConfigDict(frozen=True)

    index: int
    peak_depth: float
    quality: RepQuality
    errors: Tuple[str, ...] = ()


class SessionStats(_CamelModel):
    """Session aggregates; replaced via model_copy, never edited in place."""
    model_config = ConfigDict(frozen=True)

    max_depth: float = 0.0
    min_depth: float = 0.0
    total_reps: int = 0
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    rep_history: Tuple[RepRecord, ...] = ()


class RehabMetrics(_CamelModel):
    """Snapshot handed to display/export collaborators; replaced wholesale each accepted frame."""
    model_config = ConfigDict(frozen=True)

    exercise: ExerciseType = ExerciseType.SQUAT
    knee_flexion_left: float = 180.0
    knee_flexion_right: float = 180.0
    elbow_extension_left: float = 180.0
    elbow_extension_right: float = 180.0
    squat_depth: float = 0.0
    trunk_angle: float = 0.0
    is_good_form: bool = True
    action_label: str = "STANDING"
    reps: int = 0
    feedback: List[str] = []
    raw_diff: float = 0.0
    counting_state: CountingState = CountingState.INIT
    last_rep_quality: Optional[RepQuality] = None
    view: ViewBucket = ViewBucket.OBLIQUE
    is_session_active: bool = False
    session_stats: SessionStats = Field(default_factory=SessionStats)
    timestamp: Optional[float] = None


class SessionReport(_CamelModel):
    duration_seconds: int = 0
    duration_label: str = "0:00"
    total_reps: int = 0
    max_depth: float = 0.0
    good_reps: int = 0
    bad_reps: int = 0
    average_peak_depth: float = 0.0


# --- Export Models ---

class SnapshotMetadata(BaseModel):
    """JSON sidecar written next to a captured image."""
    timestamp: str
    metrics: RehabMetrics


class LabelPoint(BaseModel):
    x: float
    y: float


class ManualLabels(BaseModel):
    lumbar_l3: LabelPoint


class AnnotationRecord(BaseModel):
    id: int
    timestamp: str
    landmarks: List[Landmark]
    manual_labels: ManualLabels


# --- API Requests ---

class PoseFrameRequest(BaseModel):
    landmarks: List[Landmark]


class CalibrateRequest(BaseModel):
    kind: CalibrationKind


class AnnotationRequest(BaseModel):
    landmarks: List[Landmark]
    lumbar_l3: LabelPoint


class StatusResponse(BaseModel):
    status: str
    message: str = ""
