# src/rehabcoach/engine.py

from __future__ import annotations
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from .activities.activity_defs import create_strategy, resolve_exercise
from .activities.base import ExerciseStrategy
from .analysis.rep_counter import RepState, advance_rep
from .analysis.view_classifier import classify_view
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .data_models import (
    CalibrationData, CalibrationKind, ExerciseType, LandmarkLike, RehabMetrics,
    RepRecord, SessionReport, SessionStats, to_landmarks,
)
from .geometry.angles import Frame
from .metrics.depth import is_inverted, raw_depth_diff
from .scoring.report import build_session_report
from .utils.logging_config import get_logger

logger = get_logger(__name__)

CaptureHandler = Callable[[RehabMetrics], None]


@dataclass(frozen=True)
class EngineState:
    """Everything one coaching session remembers between frames."""
    rep: RepState = field(default_factory=RepState)
    is_session_active: bool = False
    session_stats: SessionStats = field(default_factory=SessionStats)
    metrics: RehabMetrics = field(default_factory=RehabMetrics)
    last_update: Optional[float] = None
    live_raw_diff: float = 0.0


def _fold_session(stats: SessionStats, depth: float, reps: int, record: Optional[RepRecord]) -> SessionStats:
    history = stats.rep_history + (record,) if record is not None else stats.rep_history
    return stats.model_copy(update={
        "max_depth": max(stats.max_depth, depth),
        "min_depth": min(stats.min_depth, depth),
        "total_reps": reps,
        "rep_history": history,
    })


def update_state(
    state: EngineState,
    frame: Frame,
    calibration: Optional[CalibrationData],
    strategy: ExerciseStrategy,
    config: EngineConfig,
    now: float,
) -> Tuple[EngineState, RehabMetrics]:
    """
    One accepted frame: (state, frame) -> (state', snapshot).

    Pure apart from reading the strategy's thresholds. Ingestion checks and
    throttling happen before this is called.
    """
    reading = strategy.derive_metrics(frame, calibration if strategy.uses_calibration else None)
    view = classify_view(frame, config.view)
    form_feedback = strategy.form_checks(frame, reading, view)
    target = strategy.check_thresholds(reading, state.rep.counting_state)
    outcome = advance_rep(state.rep, target, form_feedback, reading.depth)

    stats = state.session_stats
    if state.is_session_active:
        record = None
        if outcome.completed is not None:
            done = outcome.completed
            record = RepRecord(index=done.index, peak_depth=done.peak_depth, quality=done.quality, errors=done.errors)
        stats = _fold_session(stats, reading.depth, outcome.state.reps, record)

    metrics = RehabMetrics(
        exercise=strategy.exercise,
        knee_flexion_left=reading.knee_left,
        knee_flexion_right=reading.knee_right,
        elbow_extension_left=reading.elbow_left,
        elbow_extension_right=reading.elbow_right,
        squat_depth=reading.depth,
        trunk_angle=reading.trunk_angle,
        is_good_form=not form_feedback,
        action_label=reading.action_label,
        reps=outcome.state.reps,
        feedback=outcome.feedback,
        raw_diff=reading.raw_diff,
        counting_state=outcome.state.counting_state,
        last_rep_quality=outcome.state.last_rep_quality,
        view=view,
        is_session_active=state.is_session_active,
        session_stats=stats,
        timestamp=now,
    )
    new_state = replace(
        state,
        rep=outcome.state,
        session_stats=stats,
        metrics=metrics,
        last_update=now,
    )
    return new_state, metrics


class MetricsEngine:
    """
    Stateful wrapper around update_state for a single coaching session.

    Owns the EngineState and calibration for one exercise; separate
    exercise pages must use separate instances.
    """

    def __init__(
        self,
        exercise: Union[str, ExerciseType] = ExerciseType.SQUAT,
        config: Optional[EngineConfig] = None,
        capture_handler: Optional[CaptureHandler] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or DEFAULT_ENGINE_CONFIG
        self.strategy = create_strategy(resolve_exercise(exercise), self.config)
        self._capture_handler = capture_handler
        self._clock = clock
        self._calibration: Optional[CalibrationData] = None
        self._state = EngineState(metrics=RehabMetrics(exercise=self.strategy.exercise))

    # ---------------------- Accessors ---------------------- #
    @property
    def exercise(self) -> ExerciseType:
        return self.strategy.exercise

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def metrics(self) -> RehabMetrics:
        return self._state.metrics

    @property
    def calibration(self) -> Optional[CalibrationData]:
        return self._calibration

    @property
    def live_raw_diff(self) -> float:
        return self._state.live_raw_diff

    @property
    def is_session_active(self) -> bool:
        return self._state.is_session_active

    @property
    def session_stats(self) -> SessionStats:
        return self._state.session_stats

    # ---------------------- Frame Ingestion ---------------------- #
    def process_frame(self, landmarks: Sequence[LandmarkLike], now: Optional[float] = None) -> Optional[RehabMetrics]:
        """
        Feed one pose frame. Returns the new snapshot, or None when the frame
        was rejected at ingestion or arrived inside the throttle window.
        """
        if len(landmarks) < self.config.min_landmarks:
            logger.debug(f"[MetricsEngine] Dropped frame with {len(landmarks)} landmarks")
            return None

        try:
            frame = to_landmarks(landmarks)
        except (ValidationError, TypeError) as e:
            logger.debug(f"[MetricsEngine] Dropped malformed frame: {e}")
            return None
        now = self._clock() if now is None else now

        # calibration reads this, so it tracks every usable frame
        self._state = replace(self._state, live_raw_diff=raw_depth_diff(frame))

        last = self._state.last_update
        if last is not None and now - last < self.config.throttle_interval_s:
            return None

        prev_reps = self._state.rep.reps
        self._state, metrics = update_state(
            self._state, frame, self._calibration, self.strategy, self.config, now
        )
        if metrics.reps > prev_reps:
            logger.info(
                f"[MetricsEngine] {self.exercise.value} rep {metrics.reps} counted "
                f"({metrics.last_rep_quality.value})"
            )
        return metrics

    # ---------------------- Session Lifecycle ---------------------- #
    def start_session(self, now: Optional[float] = None) -> RehabMetrics:
        now = self._clock() if now is None else now
        stats = SessionStats(max_depth=0.0, min_depth=100.0, total_reps=0, start_time=now)
        self._state = replace(
            self._state,
            rep=replace(self._state.rep, reps=0),
            is_session_active=True,
            session_stats=stats,
            metrics=self._state.metrics.model_copy(
                update={"reps": 0, "is_session_active": True, "session_stats": stats}
            ),
        )
        logger.info(f"[MetricsEngine] {self.exercise.value} session started")
        return self._state.metrics

    def end_session(self, now: Optional[float] = None) -> RehabMetrics:
        if not self._state.is_session_active:
            logger.debug("[MetricsEngine] end_session called with no active session")
            return self._state.metrics

        now = self._clock() if now is None else now
        stats = self._state.session_stats.model_copy(
            update={"end_time": now, "total_reps": self._state.rep.reps}
        )
        self._state = replace(
            self._state,
            is_session_active=False,
            session_stats=stats,
            metrics=self._state.metrics.model_copy(
                update={"is_session_active": False, "session_stats": stats}
            ),
        )
        logger.info(f"[MetricsEngine] {self.exercise.value} session ended after {stats.total_reps} reps")
        return self._state.metrics

    def session_report(self) -> SessionReport:
        return build_session_report(self._state.session_stats)

    # ---------------------- Calibration ---------------------- #
    def calibrate(self, kind: Union[str, CalibrationKind]) -> CalibrationData:
        """
        Store the live knee-hip diff as the STANDING or SQUAT anchor.

        A missing partner anchor is seeded at a fixed offset so the range
        is always defined. Inverted or flat ranges are accepted but logged.
        """
        kind = CalibrationKind(kind)
        value = self._state.live_raw_diff
        offset = self.config.calibration_default_offset
        prev = self._calibration

        if kind == CalibrationKind.STANDING:
            cal = CalibrationData(
                standing_diff=value,
                squat_diff=prev.squat_diff if prev is not None else value - offset,
            )
        else:
            cal = CalibrationData(
                standing_diff=prev.standing_diff if prev is not None else value + offset,
                squat_diff=value,
            )
        self._calibration = cal
        logger.info(f"[MetricsEngine] Calibrated {kind.value}: {value:.3f}")

        if abs(cal.span) <= self.config.calibration_eps:
            logger.warning(
                f"[MetricsEngine] Calibration range {cal.span:.3f} is too small; depth will read 0"
            )
        elif is_inverted(cal):
            logger.warning(
                f"[MetricsEngine] Calibration looks inverted (standing {cal.standing_diff:.3f}, "
                f"squat {cal.squat_diff:.3f})"
            )
        return cal

    def reset_calibration(self) -> None:
        self._calibration = None
        logger.info("[MetricsEngine] Calibration reset")

    # ---------------------- Capture Port ---------------------- #
    def capture_snapshot(self) -> bool:
        """Hand the current snapshot to the capture handler. False when none is registered."""
        if self._capture_handler is None:
            logger.debug("[MetricsEngine] Capture requested with no handler registered")
            return False
        self._capture_handler(self._state.metrics)
        return True
