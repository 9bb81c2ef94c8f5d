"""
Laser range finder model.

A fan of beams is cast from the laser origin against every wall of the scene. Internally
every beam yields either `Hit(distance)` or `NO_RETURN`; only `LaserScanData.lengths`
turns the latter into the numeric sentinel expected by drawing code.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .geometry import Vec3
from .noise import NoiseModel, draw, resolve
from .scene import LaserConfig, Scene
from .util import shoot_lasers, shoot_multiple_lasers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hit:
    distance: float


class NoReturn:
    """Beam did not hit anything within range."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "NO_RETURN"


NO_RETURN = NoReturn()

Reading = Union[Hit, NoReturn]


class LaserScanData:
    """
    One laser scan. `lengths` holds a range per beam in beam index order, with
    `no_return_value` for beams without a return. An empty scan has no beams.
    """

    def __init__(self, readings=(), no_return_value: float = np.inf):
        self.readings: Tuple[Reading, ...] = tuple(readings)
        self.no_return_value = float(no_return_value)
        lengths = np.array(
            [r.distance if isinstance(r, Hit) else self.no_return_value for r in self.readings],
            dtype=np.float64,
        )
        lengths.flags.writeable = False
        self._lengths = lengths

    @classmethod
    def empty(cls, no_return_value: float = np.inf) -> "LaserScanData":
        return cls((), no_return_value)

    @property
    def lengths(self) -> np.ndarray:
        return self._lengths

    def hits(self) -> np.ndarray:
        """Boolean mask of beams that returned a distance."""
        return np.array([isinstance(r, Hit) for r in self.readings], dtype=bool)

    def is_empty(self) -> bool:
        return len(self.readings) == 0

    def __len__(self):
        return len(self.readings)

    def __eq__(self, other):
        if not isinstance(other, LaserScanData):
            return NotImplemented
        return self.readings == other.readings and self.no_return_value == other.no_return_value

    def __repr__(self):
        return f"LaserScanData(beams={len(self.readings)}, hits={int(self.hits().sum())})"


class LaserModel:
    def __init__(self, range_noise: Optional[NoiseModel] = None, angle_noise: Optional[NoiseModel] = None):
        """
        Parameters
        ----------
        range_noise : callable or None
            Perturbation added to every measured distance. Beams without a return stay untouched.
        angle_noise : callable or None
            Perturbation added to every beam angle before casting.
        """
        self.range_noise = resolve(range_noise)
        self.angle_noise = resolve(angle_noise)

    def scan(self, pose: Vec3, scene: Scene) -> LaserScanData:
        """
        Casts all beams of the scene's laser fan from `pose`.

        Parameters
        ----------
        pose : Vec3
            Robot pose; the beams start at the laser origin derived from it.
        scene : Scene

        Returns
        -------
        LaserScanData
            One reading per beam; `count` readings.
        """
        laser = scene.laser
        angles = laser.beam_angles() + draw(self.angle_noise, laser.count)
        origin = scene.robot.laser_origin(pose)

        distances, _ = shoot_lasers(origin.as_array(), pose.theta, angles, scene.walls)
        readings = self._to_readings(distances, laser)
        return LaserScanData(readings, laser.no_return_value)

    def scan_batch(self, poses, scene: Scene) -> np.ndarray:
        """
        Noise-free ranges for many poses at once, e.g. for weighting particles.

        Parameters
        ----------
        poses : ndarray
            Poses as rows [x, y, theta], shape (m, 3).
        scene : Scene

        Returns
        -------
        ndarray
            Shape (m, count), `no_return_value` for beams without a return.
        """
        poses = np.asarray(poses, dtype=np.float64).reshape(-1, 3)
        laser = scene.laser
        offset = scene.robot.laser_offset
        origins = poses[:, :2] + offset * np.stack((np.cos(poses[:, 2]), np.sin(poses[:, 2])), -1)
        distances, _ = shoot_multiple_lasers(origins, poses[:, 2], laser.beam_angles(), scene.walls)
        return np.where(distances < laser.max_range, distances, laser.no_return_value)

    def _to_readings(self, distances, laser: LaserConfig):
        in_range = distances < laser.max_range
        noise = draw(self.range_noise, int(in_range.sum()))
        # noisy ranges never go below zero; pushed out of range they are lost like any far echo
        measured = np.maximum(distances[in_range] + noise, 0.0)

        readings = [NO_RETURN] * laser.count
        for i, distance in zip(np.flatnonzero(in_range), measured):
            if distance < laser.max_range:
                readings[i] = Hit(float(distance))
        return readings

    def __repr__(self):
        return f"LaserModel(range_noise={self.range_noise!r}, angle_noise={self.angle_noise!r})"
