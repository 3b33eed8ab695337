from dataclasses import replace

import pytest

from rehabcoach.activities.activity_defs import EXERCISE_LIBRARY, create_strategy, resolve_exercise
from rehabcoach.activities.bench import BenchStrategy
from rehabcoach.activities.deadlift import DeadliftStrategy, active_leg_is_left
from rehabcoach.activities.squat import SquatStrategy
from rehabcoach.config import (
    MSG_CHEST_FORWARD, MSG_ELBOWS_FLARED, MSG_HIPS_UNEVEN, MSG_KNEES_INWARD,
    MSG_KNEES_TOO_BENT, MSG_UNEVEN_PUSH,
)
from rehabcoach.data_models import CountingState as S, ExerciseType, Landmark, ViewBucket
from rehabcoach.exceptions import UnknownExerciseError
from rehabcoach.geometry.landmarks import PoseLandmark as P


# ---------------- registry ----------------

def test_resolve_exercise_is_case_insensitive():
    assert resolve_exercise("bench") == ExerciseType.BENCH
    assert resolve_exercise(ExerciseType.SQUAT) == ExerciseType.SQUAT


def test_unknown_exercise_raises():
    with pytest.raises(UnknownExerciseError):
        resolve_exercise("yoga")


def test_every_exercise_has_a_strategy():
    for exercise in ExerciseType:
        strategy = create_strategy(exercise)
        assert strategy.exercise == exercise
        assert EXERCISE_LIBRARY[exercise]["tips"]


# ---------------- squat ----------------

def test_squat_depth_and_label(squat_frame):
    s = SquatStrategy()
    standing = s.derive_metrics(squat_frame(10), None)
    deep = s.derive_metrics(squat_frame(80), None)
    assert standing.depth == pytest.approx(10.0)
    assert standing.action_label == "STANDING"
    assert deep.depth == pytest.approx(80.0)
    assert deep.action_label == "SQUAT"


def test_squat_thresholds_have_dead_band(squat_frame):
    s = SquatStrategy()
    mid = s.derive_metrics(squat_frame(55), None)
    assert s.check_thresholds(mid, S.UP) == S.UP
    assert s.check_thresholds(mid, S.DOWN) == S.DOWN
    assert s.check_thresholds(s.derive_metrics(squat_frame(70), None), S.UP) == S.DOWN
    assert s.check_thresholds(s.derive_metrics(squat_frame(40), None), S.DOWN) == S.UP


def test_knees_inward_only_from_front_and_only_when_deep(squat_frame):
    s = SquatStrategy()
    frame = squat_frame(70, knees_in=True)
    reading = s.derive_metrics(frame, None)
    assert s.form_checks(frame, reading, ViewBucket.FRONT) == [MSG_KNEES_INWARD]
    assert s.form_checks(frame, reading, ViewBucket.SIDE) == []

    shallow = squat_frame(40, knees_in=True)
    assert s.form_checks(shallow, s.derive_metrics(shallow, None), ViewBucket.FRONT) == []


def test_chest_forward_limit_depends_on_view(squat_frame):
    s = SquatStrategy()
    frame = squat_frame(70)
    reading = replace(s.derive_metrics(frame, None), trunk_angle=50.0)
    assert s.form_checks(frame, reading, ViewBucket.SIDE) == [MSG_CHEST_FORWARD]
    assert s.form_checks(frame, reading, ViewBucket.OBLIQUE) == []
    assert s.form_checks(frame, reading, ViewBucket.FRONT) == []


# ---------------- bench ----------------

def test_bench_reading(bench_frame):
    b = BenchStrategy()
    top = b.derive_metrics(bench_frame(180.0), None)
    bottom = b.derive_metrics(bench_frame(80.0), None)
    assert top.depth == 0.0
    assert top.action_label == "LOCKED OUT"
    assert bottom.depth == pytest.approx(100.0)
    assert bottom.action_label == "PRESSING"


def test_bench_thresholds(bench_frame):
    b = BenchStrategy()
    assert b.check_thresholds(b.derive_metrics(bench_frame(170.0), None), S.INIT) == S.UP
    assert b.check_thresholds(b.derive_metrics(bench_frame(90.0), None), S.UP) == S.DOWN
    assert b.check_thresholds(b.derive_metrics(bench_frame(130.0), None), S.DOWN) == S.DOWN
    assert b.check_thresholds(b.derive_metrics(bench_frame(165.0), None), S.DOWN) == S.UP


def test_bench_uneven_push(bench_frame):
    b = BenchStrategy()
    frame = bench_frame(90.0, 120.0)
    reading = b.derive_metrics(frame, None)
    assert b.form_checks(frame, reading, ViewBucket.FRONT) == [MSG_UNEVEN_PUSH]
    assert b.form_checks(frame, reading, ViewBucket.OBLIQUE) == [MSG_UNEVEN_PUSH]
    assert b.form_checks(frame, reading, ViewBucket.SIDE) == []

    # 20 degrees apart: over the front limit, under the oblique one
    frame = bench_frame(90.0, 110.0)
    reading = b.derive_metrics(frame, None)
    assert b.form_checks(frame, reading, ViewBucket.FRONT) == [MSG_UNEVEN_PUSH]
    assert b.form_checks(frame, reading, ViewBucket.OBLIQUE) == []


def test_bench_flare_front_only(bench_frame):
    b = BenchStrategy()
    frame = bench_frame(flared=True)
    reading = b.derive_metrics(frame, None)
    assert b.form_checks(frame, reading, ViewBucket.FRONT) == [MSG_ELBOWS_FLARED]
    assert b.form_checks(frame, reading, ViewBucket.OBLIQUE) == []


def test_bench_no_checks_at_lockout(bench_frame):
    b = BenchStrategy()
    frame = bench_frame(175.0, 160.0)
    assert b.form_checks(frame, b.derive_metrics(frame, None), ViewBucket.FRONT) == []


# ---------------- deadlift ----------------

def test_deadlift_reading(deadlift_frame):
    d = DeadliftStrategy()
    upright = d.derive_metrics(deadlift_frame(5.0), None)
    hinged = d.derive_metrics(deadlift_frame(45.0), None)
    assert upright.action_label == "STANDING"
    assert hinged.action_label == "HINGE"
    assert hinged.depth == pytest.approx(50.0, abs=1.0)


def test_deadlift_thresholds(deadlift_frame):
    d = DeadliftStrategy()
    assert d.check_thresholds(d.derive_metrics(deadlift_frame(10.0), None), S.INIT) == S.UP
    assert d.check_thresholds(d.derive_metrics(deadlift_frame(60.0), None), S.UP) == S.DOWN
    assert d.check_thresholds(d.derive_metrics(deadlift_frame(30.0), None), S.DOWN) == S.DOWN
    assert d.check_thresholds(d.derive_metrics(deadlift_frame(10.0), None), S.DOWN) == S.UP


def test_deadlift_knee_bend(deadlift_frame):
    d = DeadliftStrategy()
    frame = deadlift_frame(40.0, bent_knees=True)
    reading = d.derive_metrics(frame, None)
    assert d.form_checks(frame, reading, ViewBucket.SIDE) == [MSG_KNEES_TOO_BENT]
    assert d.form_checks(frame, reading, ViewBucket.FRONT) == []

    straight = deadlift_frame(40.0)
    assert d.form_checks(straight, d.derive_metrics(straight, None), ViewBucket.SIDE) == []


def test_deadlift_hip_tilt(deadlift_frame):
    d = DeadliftStrategy()
    frame = deadlift_frame(40.0, hip_drop=0.01)
    reading = d.derive_metrics(frame, None)
    assert d.form_checks(frame, reading, ViewBucket.FRONT) == [MSG_HIPS_UNEVEN]
    assert d.form_checks(frame, reading, ViewBucket.SIDE) == []


def test_deadlift_checks_off_when_upright(deadlift_frame):
    d = DeadliftStrategy()
    frame = deadlift_frame(10.0, bent_knees=True, hip_drop=0.01)
    assert d.form_checks(frame, d.derive_metrics(frame, None), ViewBucket.OBLIQUE) == []


def test_active_leg_follows_visibility(deadlift_frame):
    frame = list(deadlift_frame(0.0))
    assert active_leg_is_left(frame)
    for idx in (P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_ANKLE):
        lm = frame[idx]
        frame[idx] = Landmark(x=lm.x, y=lm.y, visibility=0.1)
    assert not active_leg_is_left(frame)
