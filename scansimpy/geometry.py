"""
Value types for positions, poses and wall segments.

All types are immutable. Arithmetic returns new objects, so a pose handed out by the
simulator can never be used to change the simulator's own state.
"""
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import PARALLEL_EPS

TWO_PI = 2.0 * math.pi


def wrap_angle(theta: float) -> float:
    """
    Wraps an angle to the half-open interval (-pi, pi].

    Parameters
    ----------
    theta : float
        Angle in radians, may be any number of turns away from zero.

    Returns
    -------
    float
    """
    if -math.pi < theta <= math.pi:
        return theta
    wrapped = math.pi - (math.pi - theta) % TWO_PI
    # float modulo may round up to exactly 2*pi for tiny negative inputs
    if wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


@dataclass(frozen=True)
class Vec2:
    x: float
    y: float

    @classmethod
    def zero(cls) -> "Vec2":
        return cls(0.0, 0.0)

    @classmethod
    def from_angle(cls, angle: float) -> "Vec2":
        """Unit vector pointing in direction `angle`."""
        return cls(math.cos(angle), math.sin(angle))

    def plus(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def minus(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> "Vec2":
        return Vec2(self.x * factor, self.y * factor)

    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vec2") -> float:
        """z-component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)

    __add__ = plus
    __sub__ = minus

    def __mul__(self, factor: float) -> "Vec2":
        return self.scale(factor)

    __rmul__ = __mul__


@dataclass(frozen=True)
class Vec3:
    """
    Robot pose: position (x, y) and heading theta.
    theta is wrapped to (-pi, pi] on construction.
    """

    x: float
    y: float
    theta: float

    def __post_init__(self):
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        object.__setattr__(self, "theta", wrap_angle(float(self.theta)))

    @classmethod
    def zero(cls) -> "Vec3":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, state) -> "Vec3":
        x, y, theta = np.asarray(state, dtype=np.float64)
        return cls(x, y, theta)

    @property
    def position(self) -> Vec2:
        return Vec2(self.x, self.y)

    def heading(self) -> Vec2:
        """Unit vector along the robot's heading."""
        return Vec2.from_angle(self.theta)

    def plus(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.theta + other.theta)

    def minus(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.theta - other.theta)

    def scale(self, factor: float) -> "Vec3":
        return Vec3(self.x * factor, self.y * factor, self.theta * factor)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.theta], dtype=np.float64)

    __add__ = plus
    __sub__ = minus


@dataclass(frozen=True)
class LineSegmentFeature:
    """A static wall between p1 and p2. Both end points must differ."""

    p1: Vec2
    p2: Vec2

    def __post_init__(self):
        if self.p1 == self.p2:
            raise ValueError(f"Degenerate line segment, both end points are {self.p1}")

    @classmethod
    def from_coords(cls, x1, y1, x2, y2) -> "LineSegmentFeature":
        return cls(Vec2(float(x1), float(y1)), Vec2(float(x2), float(y2)))

    def length(self) -> float:
        return self.p2.minus(self.p1).norm()

    def as_array(self) -> np.ndarray:
        """Segment in the [x1, y1, x2, y2] format used for world arrays."""
        return np.array([self.p1.x, self.p1.y, self.p2.x, self.p2.y], dtype=np.float64)


def ray_segment_intersection(
    origin: Vec2, direction: Vec2, p1: Vec2, p2: Vec2
) -> Optional[float]:
    """
    Intersects the ray origin + t * direction with the segment p1-p2.

    Parameters
    ----------
    origin : Vec2
        Start of the ray.
    direction : Vec2
        Unit direction of the ray.
    p1, p2 : Vec2
        End points of the segment.

    Returns
    -------
    float or None
        The distance t >= 0 along the ray, or None if the ray is (nearly) parallel
        to the segment, passes beside it, or the segment lies behind the origin.
    """
    v1 = origin.minus(p1)
    v2 = p2.minus(p1)
    v3 = Vec2(-direction.y, direction.x)

    det = v2.dot(v3)
    if abs(det) <= PARALLEL_EPS * v2.norm():
        return None

    t = v2.cross(v1) / det
    s = v1.dot(v3) / det
    if t < 0.0 or s < 0.0 or s > 1.0:
        return None
    return t
