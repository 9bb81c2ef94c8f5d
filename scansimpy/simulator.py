"""
Simulator facade owning the scene, the true pose and the latest sensor readings.

A driver calls `send_control`, then `tick`, then the `get_*` accessors once per frame.
Accessors only read the latest snapshot; they never advance the simulation.
"""
import logging
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .config import DEFAULT_DT
from .geometry import LineSegmentFeature, Vec2, Vec3
from .laser import LaserModel, LaserScanData
from .motion import MotionModel, OdometryData, check_control, check_dt
from .scene import load
from .util import collision

logger = logging.getLogger(__name__)


class SimulatorState(Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"


@dataclass(frozen=True)
class _Snapshot:
    pose: Vec3
    odometry: OdometryData
    scan: LaserScanData
    ticks: int


class Simulator:
    def __init__(
        self,
        scene_source,
        *,
        motion_model: Optional[MotionModel] = None,
        laser_model: Optional[LaserModel] = None,
        initial_pose: Optional[Vec3] = None,
        dt: float = DEFAULT_DT,
        thread_safe: bool = False,
        collisions: bool = False,
    ):
        """
        Parameters
        ----------
        scene_source
            Anything `scansimpy.scene.load` accepts, or a loaded Scene.
        motion_model : MotionModel or None
            Defaults to a noise-free model.
        laser_model : LaserModel or None
            Defaults to a noise-free model.
        initial_pose : Vec3 or None
            Starting pose, overrides the start pose of the scene.
        dt : float
            Tick length used when `tick` is called without an argument.
        thread_safe : bool
            Guard all state with a lock so that controls, ticks and reads may come from different threads.
        collisions : bool
            Reject moves that make the robot body cross a wall.

        Raises
        ------
        SceneFormatError
            If the scene cannot be loaded.
        """
        self.scene = load(scene_source)
        self.motion_model = MotionModel() if motion_model is None else motion_model
        self.laser_model = LaserModel() if laser_model is None else laser_model
        self.dt = check_dt(dt)
        self.thread_safe = thread_safe
        self.collisions = collisions

        self._lock = threading.Lock() if thread_safe else nullcontext()
        self._pending: Optional[Vec2] = None
        self._collision_points: List[Vec2] = []
        self._initial_pose = self.scene.start_pose if initial_pose is None else initial_pose
        self._snapshot = self._empty_snapshot(self._initial_pose)

    def _empty_snapshot(self, pose: Vec3) -> _Snapshot:
        return _Snapshot(
            pose=pose,
            odometry=OdometryData.empty(),
            scan=LaserScanData.empty(self.scene.laser.no_return_value),
            ticks=0,
        )

    def send_control(self, control) -> None:
        """
        Sets the command for the next tick, replacing any command not yet consumed.

        Parameters
        ----------
        control : Vec2 or pair of float
            (linear velocity, angular velocity).

        Raises
        ------
        InvalidControlError
            If the command contains NaN or infinite values. The previous command is kept.
        """
        control = check_control(control)
        with self._lock:
            self._pending = control

    def tick(self, dt: Optional[float] = None) -> None:
        """
        Advances the simulation by one step: consumes the pending command (zero if none),
        moves the robot and takes a new laser scan.
        """
        dt = self.dt if dt is None else check_dt(dt)
        with self._lock:
            control = Vec2.zero() if self._pending is None else self._pending
            previous = self._snapshot

            # nothing is changed until the whole step succeeded
            pose, odometry = self.motion_model.integrate(previous.pose, control, dt)
            blocked = self.collisions and collision(self.scene.walls, self.scene.robot.enclosure, pose.as_array())
            if blocked:
                back, front = self.scene.robot.body_segment(pose)
                logger.debug(
                    "Move to %s blocked: body (%.3f, %.3f)-(%.3f, %.3f) crosses a wall",
                    pose, back.x, back.y, front.x, front.y,
                )
                scan = self.laser_model.scan(previous.pose, self.scene)
                self._collision_points.append(pose.position)
                pose = previous.pose
            else:
                scan = self.laser_model.scan(pose, self.scene)

            self._pending = None
            self._snapshot = _Snapshot(pose, odometry, scan, previous.ticks + 1)
        logger.debug("tick %d: pose=%s odometry=%s", previous.ticks + 1, pose, odometry)

    def reset(self, pose: Optional[Vec3] = None) -> None:
        """Moves the robot to `pose` (or its initial pose) and forgets all readings."""
        with self._lock:
            self._pending = None
            self._collision_points = []
            self._snapshot = self._empty_snapshot(self._initial_pose if pose is None else pose)

    def get_true_pose(self) -> Vec3:
        """Ground truth pose. For visualization and testing only, not for localization."""
        with self._lock:
            return self._snapshot.pose

    def get_odometry(self) -> OdometryData:
        with self._lock:
            return self._snapshot.odometry

    def get_laser_scan(self) -> LaserScanData:
        with self._lock:
            return self._snapshot.scan

    def get_line_features(self) -> Tuple[LineSegmentFeature, ...]:
        return self.scene.features()

    def get_readings(self) -> Tuple[Vec3, OdometryData, LaserScanData]:
        """Pose, odometry and scan of the same tick."""
        with self._lock:
            snapshot = self._snapshot
        return snapshot.pose, snapshot.odometry, snapshot.scan

    @property
    def state(self) -> SimulatorState:
        with self._lock:
            ticks = self._snapshot.ticks
        return SimulatorState.UNINITIALIZED if ticks == 0 else SimulatorState.RUNNING

    @property
    def tick_count(self) -> int:
        with self._lock:
            return self._snapshot.ticks

    @property
    def collision_points(self) -> Tuple[Vec2, ...]:
        """Positions of all moves rejected because of a collision."""
        with self._lock:
            return tuple(self._collision_points)

    # Constants for drawing code

    @property
    def num_lasers(self) -> int:
        return self.scene.laser.count

    @property
    def min_theta(self) -> float:
        return self.scene.laser.min_theta

    @property
    def max_theta(self) -> float:
        return self.scene.laser.max_theta

    @property
    def laser_dist_over_dist_val(self) -> float:
        return self.scene.laser.no_return_value

    @property
    def robot_length(self) -> float:
        return self.scene.robot.length

    def __repr__(self):
        return f"Simulator(scene={self.scene!r}, state={self.state.value}, ticks={self.tick_count})"
