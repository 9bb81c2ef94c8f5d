import json
import math

import pytest

from scansimpy import LaserConfig, LineSegmentFeature, RobotGeometry, Scene


@pytest.fixture
def one_wall_document():
    """A single wall from (10, 0) to (10, 10); beams straight ahead and straight back."""
    return {
        "robot": {"length": 2.0},
        "laser": {"count": 2, "min_theta": 0.0, "max_theta": math.pi, "max_range": 100.0},
        "walls": [[10.0, 0.0, 10.0, 10.0]],
    }


@pytest.fixture
def one_wall_scene(one_wall_document):
    return Scene.load(one_wall_document)


@pytest.fixture
def scene_file(tmp_path):
    """Writes a JSON document to a temporary scene file and returns its path."""

    def write(document, name="scene.json"):
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return write


@pytest.fixture
def box_scene():
    """Square room from (100, 100) to (700, 700), robot in the middle facing +x."""
    walls = [
        LineSegmentFeature.from_coords(100, 100, 700, 100),
        LineSegmentFeature.from_coords(700, 100, 700, 700),
        LineSegmentFeature.from_coords(700, 700, 100, 700),
        LineSegmentFeature.from_coords(100, 700, 100, 100),
    ]
    return Scene(
        walls,
        robot=RobotGeometry(length=20.0),
        laser=LaserConfig(count=181, min_theta=-math.pi / 2, max_theta=math.pi / 2, max_range=500.0),
        name="box",
    )


@pytest.fixture
def wall_ahead_scene():
    """One long wall across x = 10, robot of length 2."""
    return Scene(
        [LineSegmentFeature.from_coords(10, -10, 10, 10)],
        robot=RobotGeometry(length=2.0),
        laser=LaserConfig(count=5, min_theta=-0.5, max_theta=0.5, max_range=50.0),
    )
