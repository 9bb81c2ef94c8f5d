"""
Tests for wall and landmark extraction from scans.
"""
import math

import numpy as np
import pytest

from scansimpy.geometry import LineSegmentFeature, Vec2, Vec3
from scansimpy.laser import NO_RETURN, Hit, LaserModel, LaserScanData
from scansimpy.scene import LaserConfig, Scene
from scansimpy.sensing import RansacLineExtractor, perpendicular_distance, scan_to_points

POSE = Vec3(400.0, 400.0, 0.0)


def on_a_wall(point, tolerance=1.0):
    x, y = point
    return abs(x - 700.0) < tolerance or abs(y - 700.0) < tolerance or abs(y - 100.0) < tolerance


@pytest.fixture
def box_scan(box_scene):
    return LaserModel().scan(POSE, box_scene)


class TestScanToPoints:
    def test_points_lie_on_walls(self, box_scene, box_scan):
        points = scan_to_points(box_scan, POSE, box_scene)
        assert points.shape == (181, 2)
        for point in points:
            assert on_a_wall(point, tolerance=1e-6)

    def test_no_return_rows_are_nan(self, one_wall_scene):
        scan = LaserModel().scan(Vec3.zero(), one_wall_scene)
        points = scan_to_points(scan, Vec3.zero(), one_wall_scene)
        np.testing.assert_allclose(points[0], [10.0, 0.0], atol=1e-9)
        assert np.all(np.isnan(points[1]))

    def test_empty_scan(self, one_wall_scene):
        assert scan_to_points(LaserScanData.empty(), Vec3.zero(), one_wall_scene).shape == (0, 2)


class TestPerpendicularDistance:
    def test_distance_to_horizontal_line(self):
        points = np.array([[0.0, 3.0], [5.0, -2.0]])
        dist = perpendicular_distance(np.array([0.0, 0.0]), np.array([1.0, 0.0]), points)
        np.testing.assert_allclose(dist, [[3.0, 2.0]])

    def test_coinciding_points_give_infinite_distance(self):
        dist = perpendicular_distance(np.array([1.0, 1.0]), np.array([1.0, 1.0]), np.array([[0.0, 0.0]]))
        assert np.isinf(dist).all()


class TestRansacLineExtractor:
    def test_finds_the_three_visible_walls(self, box_scene, box_scan):
        result = RansacLineExtractor(seed=0).extract(box_scan, POSE, box_scene)
        assert len(result.lines) == 3
        for line in result.lines:
            assert on_a_wall((line.p1.x, line.p1.y))
            assert on_a_wall((line.p2.x, line.p2.y))
            assert line.length() > 200.0

    def test_corners_become_landmarks(self, box_scene, box_scan):
        result = RansacLineExtractor(seed=0).extract(box_scan, POSE, box_scene)
        for corner in (Vec2(700.0, 700.0), Vec2(700.0, 100.0)):
            assert min(corner.minus(landmark).norm() for landmark in result.landmarks) < 15.0

    def test_loose_ends_at_range_jumps(self):
        # a short wall in front of an empty background
        scene = Scene(
            [LineSegmentFeature.from_coords(100.0, -60.0, 100.0, 60.0)],
            laser=LaserConfig(count=181, min_theta=-math.pi / 2, max_theta=math.pi / 2, max_range=500.0),
        )
        pose = Vec3(-10.0, 0.0, 0.0)
        scan = LaserModel().scan(pose, scene)
        result = RansacLineExtractor(seed=1).extract(scan, pose, scene)

        assert len(result.lines) == 1
        ends = sorted(result.landmarks, key=lambda p: p.y)
        assert len(ends) == 2
        assert ends[0].x == pytest.approx(100.0)
        assert ends[0].y == pytest.approx(-60.0, abs=3.0)
        assert ends[1].y == pytest.approx(60.0, abs=3.0)

    def test_too_few_points_give_no_line(self, one_wall_scene):
        scan = LaserModel().scan(Vec3.zero(), one_wall_scene)
        result = RansacLineExtractor(seed=0).extract(scan, Vec3.zero(), one_wall_scene)
        assert result.lines == []

    def test_empty_scan(self, one_wall_scene):
        result = RansacLineExtractor().extract(LaserScanData.empty(), Vec3.zero(), one_wall_scene)
        assert result.lines == [] and result.landmarks == []

    def test_fit_lines_on_points(self):
        xs = np.linspace(0.0, 100.0, 40)
        points = np.stack([xs, 0.5 * xs + 3.0], -1)
        lines = RansacLineExtractor(seed=2).fit_lines(points)
        assert len(lines) == 1
        np.testing.assert_allclose(lines[0].as_array(), [0.0, 3.0, 100.0, 53.0], atol=1e-6)

    def test_manual_scan(self):
        scene = Scene([], robot=None, laser=LaserConfig(count=3, min_theta=-0.1, max_theta=0.1, max_range=50.0))
        scan = LaserScanData([Hit(10.0), NO_RETURN, Hit(10.0)], scene.laser.no_return_value)
        result = RansacLineExtractor(seed=0).extract(scan, Vec3.zero(), scene)
        # both hits border a beam without return
        assert len(result.landmarks) == 2
