import numpy as np
import pytest

from rehabcoach.geometry.angles import (
    calculate_angle, elbow_angles, knee_angles, lean_from_vertical, trunk_angle,
)


def test_right_angle():
    assert calculate_angle((0.0, 1.0), (0.0, 0.0), (1.0, 0.0)) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert calculate_angle((0.0, 0.0), (0.5, 0.5), (1.0, 1.0)) == pytest.approx(180.0)


def test_reflex_angle_folds_below_180():
    # 270 degrees one way is 90 the other
    assert calculate_angle((0.0, -1.0), (0.0, 0.0), (-1.0, 0.0)) == pytest.approx(90.0)


def test_degenerate_vector_does_not_produce_nan():
    angle = calculate_angle((0.0, 0.0), (0.0, 0.0), (1.0, 0.0))
    assert angle == angle
    assert 0.0 <= angle <= 180.0


def test_lean_from_vertical():
    assert lean_from_vertical((0.5, 0.2), (0.5, 0.5)) == pytest.approx(0.0)
    assert lean_from_vertical((0.8, 0.5), (0.5, 0.5)) == pytest.approx(90.0)
    assert lean_from_vertical((0.2, 0.2), (0.5, 0.5)) == pytest.approx(45.0)


def test_standing_squatter_has_straight_limbs(squat_frame):
    frame = squat_frame(0)
    left, right = knee_angles(frame)
    assert left == pytest.approx(180.0)
    assert right == pytest.approx(180.0)
    assert trunk_angle(frame) == pytest.approx(0.0)


def test_elbow_angles_follow_builder(bench_frame):
    left, right = elbow_angles(bench_frame(90.0, 120.0))
    assert left == pytest.approx(90.0)
    assert right == pytest.approx(120.0)


def test_trunk_angle_follows_hinge(deadlift_frame):
    assert trunk_angle(deadlift_frame(60.0)) == pytest.approx(60.0, abs=0.5)


def _random_triples(n=200, seed=7):
    rng = np.random.default_rng(seed)
    return [tuple(map(tuple, rng.uniform(-1.0, 2.0, size=(3, 2)))) for _ in range(n)]


@pytest.mark.parametrize("a,b,c", _random_triples())
def test_angle_always_in_range(a, b, c):
    angle = calculate_angle(a, b, c)
    assert 0.0 <= angle <= 180.0
