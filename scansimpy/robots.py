import numpy as np

from .config import ROBOT_LENGTH
from .geometry import Vec2, Vec3
from .util import rotate


class RobotGeometry:
    def __init__(self, length: float = ROBOT_LENGTH, laser_offset: float = None):
        """
        Geometric constants of the simulated robot.
        The robot is modeled as a line of `length` centered on its pose and aligned with its heading.

        Parameters
        ----------
        length : float
            Length of the robot body.
        laser_offset : float or None
            Signed distance of the laser scanner from the pose along the heading.
            Defaults to half the length, i.e. the scanner sits at the front end.
        """
        self.length = float(length)
        self.laser_offset = 0.5 * self.length if laser_offset is None else float(laser_offset)

    @property
    def enclosure(self):
        """Robot hull in robot coordinates, format [[x1,y1,x2,y2]]."""
        half = 0.5 * self.length
        return np.array([[-half, 0.0, half, 0.0]])

    def laser_origin(self, pose: Vec3) -> Vec2:
        """Position of the laser scanner in world coordinates."""
        return pose.position.plus(pose.heading().scale(self.laser_offset))

    def body_segment(self, pose: Vec3):
        """End points (back, front) of the robot body in world coordinates."""
        x1, y1, x2, y2 = self.enclosure[0]
        pos = pose.position.as_array()
        back = pos + rotate(pose.theta, np.array([x1, y1]))
        front = pos + rotate(pose.theta, np.array([x2, y2]))
        return Vec2(*back), Vec2(*front)

    def __eq__(self, other):
        if not isinstance(other, RobotGeometry):
            return NotImplemented
        return self.length == other.length and self.laser_offset == other.laser_offset

    def __repr__(self):
        return f"RobotGeometry(length={self.length}, laser_offset={self.laser_offset})"
