# src/rehabcoach/config.py
# ---------------------------------------------------------------
# Global configuration for the coaching engine: ingestion limits,
# throttle cadence, calibration guards, view-bucket boundaries and
# per-exercise rep/form thresholds.
# Every tunable lives here so the heuristics can be adjusted without
# touching the engine or the exercise strategies.
# ---------------------------------------------------------------

import os
from dataclasses import dataclass, field
from typing import List

# ------------------ Ingestion / Throttle ------------------

MIN_LANDMARKS = 29                   # indices 0..28 must be present (ankles are 27/28)
THROTTLE_INTERVAL_S = 0.100          # at most one full recomputation per 100 ms (<= 10 Hz)

# ------------------ Depth Proxy / Calibration ------------------

DEFAULT_DEPTH_ANCHOR = 0.3           # uncalibrated: knee-hip diff at which depth reads 0
CALIBRATION_EPS = 0.05               # below this |squat - standing| range the rescale is skipped
CALIBRATION_DEFAULT_OFFSET = 0.2     # placeholder gap used when only one anchor is captured

# ------------------ Feedback Identifiers ------------------

MSG_KNEES_INWARD = "KNEES INWARD"
MSG_CHEST_FORWARD = "CHEST FORWARD"
MSG_UNEVEN_PUSH = "UNEVEN PUSH"
MSG_ELBOWS_FLARED = "ELBOWS FLARED"
MSG_KNEES_TOO_BENT = "KNEES TOO BENT"
MSG_HIPS_UNEVEN = "HIPS UNEVEN"

MSG_GOOD_REP = "GOOD REP"            # one-shot, presentation only
MSG_BAD_REP = "CHECK FORM"           # one-shot, presentation only


@dataclass(frozen=True)
class ViewThresholds:
    """
    Boundaries on (mean shoulder/hip width) / torso length.
    Wide shoulders relative to the torso means the camera faces the user.
    """
    front_min_ratio: float = 0.45
    side_max_ratio: float = 0.20


@dataclass(frozen=True)
class SquatThresholds:
    enter_depth: float = 65.0        # UP -> DOWN when depth rises above this
    exit_depth: float = 45.0         # DOWN -> UP when depth falls below this
    squatting_depth: float = 50.0    # action label / form checks switch on above this
    valgus_ratio_front: float = 0.70 # knee spread / ankle spread
    trunk_lean_side: float = 45.0    # degrees from vertical
    trunk_lean_oblique: float = 55.0


@dataclass(frozen=True)
class BenchThresholds:
    enter_elbow: float = 100.0       # UP -> DOWN when mean elbow angle drops below this
    exit_elbow: float = 160.0        # DOWN -> UP once arms are locked out again
    lockout_elbow: float = 170.0     # 0 % range of motion
    bottom_elbow: float = 80.0       # 100 % range of motion
    asymmetry_front: float = 15.0    # |left - right| elbow angle, degrees
    asymmetry_oblique: float = 25.0
    flare_front: float = 75.0        # elbow-shoulder-hip angle, degrees


@dataclass(frozen=True)
class DeadliftThresholds:
    enter_trunk: float = 45.0        # UP -> DOWN once hinged past this
    exit_trunk: float = 20.0         # DOWN -> UP when back near vertical
    full_hinge: float = 90.0         # 100 % range of motion
    hinging_trunk: float = 20.0      # action label / form checks switch on above this
    knee_bend_side: float = 140.0    # knee angle below this is too much squat
    knee_bend_oblique: float = 125.0
    hip_tilt_front: float = 0.20     # |left hip y - right hip y| / hip width
    hip_tilt_oblique: float = 0.35


@dataclass(frozen=True)
class EngineConfig:
    min_landmarks: int = MIN_LANDMARKS
    throttle_interval_s: float = THROTTLE_INTERVAL_S
    default_depth_anchor: float = DEFAULT_DEPTH_ANCHOR
    calibration_eps: float = CALIBRATION_EPS
    calibration_default_offset: float = CALIBRATION_DEFAULT_OFFSET
    view: ViewThresholds = field(default_factory=ViewThresholds)
    squat: SquatThresholds = field(default_factory=SquatThresholds)
    bench: BenchThresholds = field(default_factory=BenchThresholds)
    deadlift: DeadliftThresholds = field(default_factory=DeadliftThresholds)


DEFAULT_ENGINE_CONFIG = EngineConfig()


# ------------------ Service Settings ------------------
# Read once from the environment; only the HTTP layer uses these.

@dataclass(frozen=True)
class Settings:
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    export_dir: str = os.getenv("EXPORT_DIR", "exports")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
