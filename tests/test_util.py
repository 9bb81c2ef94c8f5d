"""
Tests for the vectorized ray casting and collision helpers.
"""
import math

import numpy as np
import pytest

from scansimpy.geometry import Vec2, ray_segment_intersection
from scansimpy.util import collision, compute_world_bounds, rotate, shoot_lasers, shoot_multiple_lasers

WORLD = np.array(
    [
        [0.0, 0.0, 10.0, 0.0],
        [10.0, 0.0, 10.0, 10.0],
        [10.0, 10.0, 0.0, 10.0],
        [0.0, 10.0, 0.0, 0.0],
        [4.0, 6.0, 7.0, 3.0],
    ]
)


class TestShootLasers:
    def test_nearest_wall_wins(self):
        distances, hitpoints = shoot_lasers(np.array([2.0, 1.0]), 0.0, np.array([0.0]), WORLD)
        assert distances[0] == pytest.approx(8.0)
        np.testing.assert_allclose(hitpoints[0], [10.0, 1.0])

        distances, _ = shoot_lasers(np.array([2.0, 2.0]), math.pi / 4, np.array([0.0]), WORLD)
        # the diagonal wall x + y = 10 is closer than the corner
        assert distances[0] == pytest.approx(3 * math.sqrt(2))

    def test_matches_single_ray_intersection(self):
        pos = np.array([1.5, 2.5])
        angles = np.linspace(-math.pi, math.pi, 37)
        distances, _ = shoot_lasers(pos, 0.3, angles, WORLD)
        for angle, distance in zip(angles, distances):
            direction = Vec2.from_angle(0.3 + angle)
            expected = min(
                t
                for t in (
                    ray_segment_intersection(Vec2(*pos), direction, Vec2(*w[:2]), Vec2(*w[2:]))
                    for w in WORLD
                )
                if t is not None
            )
            assert distance == pytest.approx(expected)

    def test_empty_world_returns_max_value(self):
        distances, _ = shoot_lasers(np.array([0.0, 0.0]), 0.0, np.array([0.0, 1.0]), np.empty((0, 4)), max_value=99.0)
        np.testing.assert_array_equal(distances, [99.0, 99.0])

    def test_parallel_wall_is_a_miss(self):
        world = np.array([[0.0, 1.0, 10.0, 1.0], [2.0, 0.0, 8.0, 0.0]])
        distances, _ = shoot_lasers(np.array([0.0, 0.0]), 0.0, np.array([0.0]), world)
        assert np.isinf(distances[0])

    def test_rejects_bad_position(self):
        with pytest.raises(AssertionError):
            shoot_lasers(np.array([0.0, 0.0, 0.0]), 0.0, np.array([0.0]), WORLD)


class TestShootMultipleLasers:
    def test_matches_single_pose(self):
        positions = np.array([[2.0, 5.0], [5.0, 8.0], [8.0, 1.0]])
        thetas = np.array([0.0, 1.0, -2.5])
        angles = np.linspace(-math.pi / 2, math.pi / 2, 9)
        distances, hitpoints = shoot_multiple_lasers(positions, thetas, angles, WORLD)
        assert distances.shape == (3, 9)
        assert hitpoints.shape == (3, 9, 2)
        for i in range(3):
            single, _ = shoot_lasers(positions[i], thetas[i], angles, WORLD)
            np.testing.assert_allclose(distances[i], single)


class TestCollision:
    enclosure = np.array([[-1.0, 0.0, 1.0, 0.0]])

    def test_robot_crossing_wall(self):
        world = np.array([[10.0, -10.0, 10.0, 10.0]])
        assert collision(world, self.enclosure, np.array([9.5, 0.0, 0.0]))

    def test_robot_clear_of_wall(self):
        world = np.array([[10.0, -10.0, 10.0, 10.0]])
        assert not collision(world, self.enclosure, np.array([8.0, 0.0, 0.0]))

    def test_rotated_robot(self):
        world = np.array([[10.0, -10.0, 10.0, 10.0]])
        # facing +y the robot stays clear of the wall
        assert not collision(world, self.enclosure, np.array([9.5, 0.0, math.pi / 2]))

    def test_empty_world(self):
        assert not collision(np.empty((0, 4)), self.enclosure, np.array([0.0, 0.0, 0.0]))


def test_compute_world_bounds():
    assert compute_world_bounds(WORLD) == (0.0, 0.0, 10.0, 10.0)
    assert compute_world_bounds(np.empty((0, 4))) == (0.0, 0.0, 0.0, 0.0)


def test_rotate():
    np.testing.assert_allclose(rotate(math.pi / 2, np.array([1.0, 0.0])), [0.0, 1.0], atol=1e-12)
