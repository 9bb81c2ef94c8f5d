"""
# Description of the mobile robot simulator ScanSimPy.

ScanSimPy is a headless 2D mobile robot simulator. It owns a simple world comprised of
line-based walls, moves a robot through it under velocity commands and produces the readings
a localization algorithm works with: odometry and laser scans.

The robot is modeled as a line of fixed length with a laser scanner at its front end.
Laser scans are generated by a simple raytracing method against every wall.

Currently, the following functions are provided:
- Loading worlds from JSON, including robot and laser fan settings
- Unicycle motion model with pluggable process noise
- Odometry reporting the commanded motion, optionally with its own noise
- Raytracing of laser beams from a single and from multiple robot positions
- Optional collision detection between the robot body and the walls
- A background loop ticking the simulator at a fixed rate
- Extraction of wall segments and landmarks from scans (RANSAC)

Drawing the world, robot and scans is left to the caller; a driver calls `send_control`,
`tick` and the `get_*` accessors of `Simulator` once per frame.

# Dependencies and installation

ScanSimPy depends on a Python Version >= 3.9, numpy and scipy.
Install with `pip3 install .`, or `pip3 install .[test]` to run the tests with pytest.
"""
from .errors import InvalidControlError, ScanSimError, SceneFormatError
from .geometry import LineSegmentFeature, Vec2, Vec3, ray_segment_intersection, wrap_angle
from .laser import NO_RETURN, Hit, LaserModel, LaserScanData, NoReturn
from .motion import MotionModel, OdometryData
from .noise import DistributionNoise, NoNoise, gaussian, uniform
from .robots import RobotGeometry
from .scene import LaserConfig, Scene, load, load_world
from .simulator import Simulator, SimulatorState
from .clock import SimulationLoop
from .config import LASER_DIST_OVER_DIST_VAL, MAX_THETA, MIN_THETA, NUM_LASERS

__all__ = [
    "DistributionNoise",
    "Hit",
    "InvalidControlError",
    "LASER_DIST_OVER_DIST_VAL",
    "LaserConfig",
    "LaserModel",
    "LaserScanData",
    "LineSegmentFeature",
    "MAX_THETA",
    "MIN_THETA",
    "MotionModel",
    "NO_RETURN",
    "NUM_LASERS",
    "NoNoise",
    "NoReturn",
    "OdometryData",
    "RobotGeometry",
    "ScanSimError",
    "Scene",
    "SceneFormatError",
    "SimulationLoop",
    "Simulator",
    "SimulatorState",
    "Vec2",
    "Vec3",
    "gaussian",
    "load",
    "load_world",
    "ray_segment_intersection",
    "uniform",
    "wrap_angle",
]
