"""Tests for angle and rotation helpers."""

import math
import random

import numpy as np
import pytest

from buildosm.utils.matrix_utils import (
    FULL_TURN,
    angle_between_vectors,
    rotate_points,
    rotation_about_y,
    rotation_about_z,
    wrap_angle,
)


class TestAngleBetweenVectors:
    """Unsigned angle between direction vectors."""

    def test_orthogonal_vectors(self):
        assert angle_between_vectors((1, 0, 0), (0, 1, 0)) == pytest.approx(math.pi / 2)

    def test_opposite_vectors(self):
        assert angle_between_vectors((1, 0, 0), (-1, 0, 0)) == pytest.approx(math.pi)

    def test_angle_is_unsigned(self):
        assert angle_between_vectors((1, 0), (0, -1)) == pytest.approx(math.pi / 2)

    def test_mixed_dimensions_are_padded(self):
        assert angle_between_vectors((0, 1), (1, 0, 0)) == pytest.approx(math.pi / 2)

    def test_nearly_parallel_vectors_do_not_produce_nan(self):
        a = (1.0, 1e-17, 0.0)
        b = (1.0 + 1e-16, 0.0, 0.0)
        result = angle_between_vectors(a, b)
        assert result is not None
        assert not math.isnan(result)
        assert result == pytest.approx(0.0, abs=1e-7)

    def test_zero_vector_returns_none(self):
        assert angle_between_vectors((0, 0, 0), (1, 0, 0)) is None


class TestWrapAngle:
    """Wraparound into the closed range [-2π, 2π]."""

    def test_values_inside_range_untouched(self):
        for value in (0.0, 1.0, -1.0, FULL_TURN, -FULL_TURN, 5.5, -5.5):
            assert wrap_angle(value) == value

    def test_positive_overflow(self):
        assert wrap_angle(FULL_TURN + 0.5) == pytest.approx(0.5)

    def test_negative_overflow(self):
        assert wrap_angle(-FULL_TURN - 0.25) == pytest.approx(-0.25)

    def test_several_turns(self):
        assert wrap_angle(3 * FULL_TURN + 1.0) == pytest.approx(1.0)

    @pytest.mark.parametrize("seed", range(20))
    def test_random_hop_sums_stay_in_range(self, seed):
        rng = random.Random(seed)
        total = 0.0
        previous = None
        for _ in range(rng.randint(1, 40)):
            direction = (rng.uniform(-1, 1), rng.uniform(-1, 1), rng.uniform(-1, 1))
            if previous is not None:
                step = angle_between_vectors(previous, direction)
                if step is not None:
                    total = wrap_angle(total + step)
            previous = direction
            assert -FULL_TURN <= total <= FULL_TURN


class TestRotations:
    """Rotation matrices and point rotation."""

    def test_rotation_about_z_quarter_turn(self):
        rotated = rotate_points([(1.0, 0.0, 0.0)], rotation_about_z(math.pi / 2))
        np.testing.assert_allclose(rotated, [[0.0, 1.0, 0.0]], atol=1e-12)

    def test_rotation_about_y_quarter_turn(self):
        rotated = rotate_points([(1.0, 0.0, 0.0)], rotation_about_y(math.pi / 2))
        np.testing.assert_allclose(rotated, [[0.0, 0.0, -1.0]], atol=1e-12)

    def test_rotate_points_without_matrix_copies(self):
        points = np.array([[1.0, 2.0, 3.0]])
        rotated = rotate_points(points, None)
        np.testing.assert_array_equal(rotated, points)
        assert rotated is not points

    def test_zero_angles_are_identity(self):
        np.testing.assert_allclose(rotation_about_z(0.0), np.eye(3))
        np.testing.assert_allclose(rotation_about_y(0.0), np.eye(3))
