"""
Static scene: the walls the robot moves among, plus the robot and laser constants.

Scenes are read from JSON. The full format is

    {
      "robot": {"length": 20.0, "laser_offset": 10.0, "start": [50.0, 50.0, 0.0]},
      "laser": {"count": 181, "min_theta": -1.5708, "max_theta": 1.5708, "max_range": 500.0},
      "walls": [[x1, y1, x2, y2], ...]
    }

where every section except "walls" is optional. A bare list of walls is accepted as well,
which is the format of the worlds shipped in `scansimpy.worlds`.
"""
import json
import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from numbers import Real
from typing import Optional, Tuple

import numpy as np

from . import config
from .errors import SceneFormatError
from .geometry import LineSegmentFeature, Vec3
from .robots import RobotGeometry
from .util import compute_world_bounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaserConfig:
    """Geometry of the laser fan."""

    count: int = config.NUM_LASERS
    min_theta: float = config.MIN_THETA
    max_theta: float = config.MAX_THETA
    max_range: float = config.MAX_DISTANCE

    @property
    def no_return_value(self) -> float:
        """Sentinel range reported for beams without a return."""
        return self.max_range + 1

    def beam_angles(self) -> np.ndarray:
        """
        Beam angles relative to the robot heading, in beam index order.
        A single beam points at `min_theta`.
        """
        if self.count == 1:
            return np.array([self.min_theta])
        percentage = np.arange(self.count) / (self.count - 1.0)
        return self.min_theta + (self.max_theta - self.min_theta) * percentage


class Scene:
    def __init__(
        self,
        features,
        robot: Optional[RobotGeometry] = None,
        laser: Optional[LaserConfig] = None,
        start_pose: Optional[Vec3] = None,
        name: Optional[str] = None,
    ):
        """
        Parameters
        ----------
        features : iterable of LineSegmentFeature
            The walls, in load order.
        robot : RobotGeometry or None
            Robot constants, defaults from `scansimpy.config`.
        laser : LaserConfig or None
            Laser fan, defaults from `scansimpy.config`.
        start_pose : Vec3 or None
            Pose the robot starts at, the origin if omitted.
        name : str or None
            Where the scene came from, used in log messages.
        """
        self._features = tuple(features)
        self.robot = RobotGeometry() if robot is None else robot
        self.laser = LaserConfig() if laser is None else laser
        self.start_pose = Vec3.zero() if start_pose is None else start_pose
        self.name = name

        walls = np.array([f.as_array() for f in self._features], dtype=np.float64).reshape(-1, 4)
        walls.flags.writeable = False
        self._walls = walls

    @classmethod
    def load(cls, source) -> "Scene":
        return load(source)

    def features(self) -> Tuple[LineSegmentFeature, ...]:
        return self._features

    @property
    def walls(self) -> np.ndarray:
        """Read-only world array in the format [[x1,y1,x2,y2], ... ]."""
        return self._walls

    def bounds(self):
        """(min_x, min_y, max_x, max_y) of all walls."""
        return compute_world_bounds(self._walls)

    def __len__(self):
        return len(self._features)

    def __repr__(self):
        return f"Scene(name={self.name!r}, walls={len(self._features)}, robot={self.robot!r}, laser={self.laser!r})"


def load(source) -> Scene:
    """
    Reads a scene.

    Parameters
    ----------
    source : str, os.PathLike, file object, mapping, or sequence of walls
        A path to a JSON file, an open text file, an already decoded JSON document
        or a bare list of [x1, y1, x2, y2] walls.

    Returns
    -------
    Scene

    Raises
    ------
    SceneFormatError
        If the source cannot be read or is not a valid scene.
    """
    if isinstance(source, Scene):
        return source

    if isinstance(source, (str, os.PathLike)):
        name = os.fspath(source)
        try:
            with open(source, "r", encoding="utf-8") as file:
                document = json.load(file)
        except OSError as exc:
            raise SceneFormatError(f"cannot read scene file ({exc.strerror or exc})", name) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SceneFormatError(f"invalid JSON ({exc})", name) from exc
    elif hasattr(source, "read"):
        name = getattr(source, "name", "<stream>")
        try:
            document = json.load(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SceneFormatError(f"invalid JSON ({exc})", name) from exc
    else:
        name = "<memory>"
        document = source

    return _build(document, name)


def load_world(name: str) -> Scene:
    """
    Loads one of the worlds bundled with the package, e.g. ``load_world("simple_world.json")``.
    """
    from . import worlds

    resource = resources.files(worlds).joinpath(name)
    try:
        with resource.open("r", encoding="utf-8") as file:
            document = json.load(file)
    except OSError as exc:
        raise SceneFormatError("no such bundled world", name) from exc
    except json.JSONDecodeError as exc:
        raise SceneFormatError(f"invalid JSON ({exc})", name) from exc
    return _build(document, name)


def _build(document, name) -> Scene:
    scene = _parse_document(document, name)
    if len(scene) == 0:
        logger.warning("Scene %s contains no walls, every beam will report no return", name)
    logger.info("Loaded scene %s with %d walls", name, len(scene))
    return scene


def _parse_document(document, name) -> Scene:
    if isinstance(document, Mapping):
        if "walls" not in document:
            raise SceneFormatError("missing 'walls'", name)
        walls = _parse_walls(document["walls"], name)
        robot, start_pose = _parse_robot(document.get("robot", {}), name)
        laser = _parse_laser(document.get("laser", {}), name)
        return Scene(walls, robot=robot, laser=laser, start_pose=start_pose, name=name)

    if isinstance(document, (list, tuple, np.ndarray)):
        return Scene(_parse_walls(document, name), name=name)

    raise SceneFormatError(f"unsupported scene document of type {type(document).__name__}", name)


def _parse_walls(raw, name):
    if not isinstance(raw, (list, tuple, np.ndarray)):
        raise SceneFormatError("'walls' must be a list", name)

    features = []
    for i, row in enumerate(raw):
        if isinstance(row, (str, bytes, Mapping)):
            raise SceneFormatError(f"wall {i} must be [x1, y1, x2, y2]", name)
        try:
            coords = np.asarray(row, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError) as exc:
            raise SceneFormatError(f"wall {i} is not numeric", name) from exc
        if coords.shape[0] != 4:
            raise SceneFormatError(f"wall {i} must have 4 coordinates, got {coords.shape[0]}", name)
        if not np.all(np.isfinite(coords)):
            raise SceneFormatError(f"wall {i} has non-finite coordinates", name)
        try:
            features.append(LineSegmentFeature.from_coords(*coords))
        except ValueError as exc:
            raise SceneFormatError(f"wall {i}: {exc}", name) from exc
    return features


def _finite(value, label, name):
    if isinstance(value, bool) or not isinstance(value, Real):
        raise SceneFormatError(f"'{label}' must be a number, got {value!r}", name)
    value = float(value)
    if not math.isfinite(value):
        raise SceneFormatError(f"'{label}' must be finite", name)
    return value


def _number(section, key, default, name, where):
    return _finite(section.get(key, default), f"{where}.{key}", name)


def _section(document, where, name):
    if not isinstance(document, Mapping):
        raise SceneFormatError(f"'{where}' must be an object", name)
    return document


def _parse_robot(section, name):
    section = _section(section, "robot", name)
    length = _number(section, "length", config.ROBOT_LENGTH, name, "robot")
    if length < 0:
        raise SceneFormatError("'robot.length' must not be negative", name)
    offset = _number(section, "laser_offset", 0.5 * length, name, "robot")

    start_pose = None
    if "start" in section:
        start = section["start"]
        if isinstance(start, Mapping):
            start = [start.get("x"), start.get("y"), start.get("theta", 0.0)]
        if not isinstance(start, (list, tuple)) or len(start) != 3:
            raise SceneFormatError("'robot.start' must be [x, y, theta]", name)
        x, y, theta = (_finite(v, "robot.start", name) for v in start)
        start_pose = Vec3(x, y, theta)

    return RobotGeometry(length=length, laser_offset=offset), start_pose


def _parse_laser(section, name):
    section = _section(section, "laser", name)
    count = section.get("count", config.NUM_LASERS)
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise SceneFormatError(f"'laser.count' must be a positive integer, got {count!r}", name)
    min_theta = _number(section, "min_theta", config.MIN_THETA, name, "laser")
    max_theta = _number(section, "max_theta", config.MAX_THETA, name, "laser")
    if min_theta > max_theta:
        raise SceneFormatError("'laser.min_theta' must not exceed 'laser.max_theta'", name)
    max_range = _number(section, "max_range", config.MAX_DISTANCE, name, "laser")
    if max_range <= 0:
        raise SceneFormatError("'laser.max_range' must be positive", name)
    return LaserConfig(count=count, min_theta=min_theta, max_theta=max_theta, max_range=max_range)
