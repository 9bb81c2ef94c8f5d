"""
Unicycle motion model with optional process noise.

A control is a pair (v, w) of linear and angular velocity. Over a tick of length dt the
robot travels ds = v * dt along the midpoint heading theta + dtheta / 2 and turns by
dtheta = w * dt (path integration, see Siegwart/Nourbakhsh, p. 188).
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import InvalidControlError
from .geometry import Vec2, Vec3
from .noise import NoiseModel, draw, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OdometryData:
    """
    Motion reported by odometry for the last tick.

    translation : distance travelled along the heading
    rotation : change of heading in radians
    dt : length of the tick in seconds
    """

    translation: float = 0.0
    rotation: float = 0.0
    dt: float = 0.0

    @classmethod
    def empty(cls) -> "OdometryData":
        return cls()

    def as_control(self) -> Vec2:
        """The reported motion as a velocity pair, zero for an empty tick."""
        if self.dt == 0.0:
            return Vec2.zero()
        return Vec2(self.translation / self.dt, self.rotation / self.dt)


def check_control(control: Vec2) -> Vec2:
    """Converts a control to a Vec2 of floats and rejects NaN or infinite values."""
    if not isinstance(control, Vec2):
        try:
            v, w = control
        except (TypeError, ValueError) as exc:
            raise InvalidControlError(f"control must be a pair (v, w), got {control!r}") from exc
        control = Vec2(v, w)
    try:
        control = Vec2(float(control.x), float(control.y))
    except (TypeError, ValueError) as exc:
        raise InvalidControlError(f"control must be numeric, got {control!r}") from exc
    if not control.is_finite():
        raise InvalidControlError(f"control must be finite, got {control!r}")
    return control


def check_dt(dt: float) -> float:
    dt = float(dt)
    if not math.isfinite(dt) or dt < 0.0:
        raise ValueError(f"dt must be a finite, non-negative number of seconds, got {dt}")
    return dt


def update_pose(x, y, theta, ds, dtheta):
    """Path integration of a displacement ds and rotation dtheta."""
    mid = theta + dtheta / 2.0
    x = x + ds * np.cos(mid)
    y = y + ds * np.sin(mid)
    theta = theta + dtheta
    return x, y, theta


class MotionModel:
    def __init__(
        self,
        translation_noise: Optional[NoiseModel] = None,
        rotation_noise: Optional[NoiseModel] = None,
        odometry_noise: Optional[NoiseModel] = None,
    ):
        """
        Parameters
        ----------
        translation_noise : callable or None
            Perturbation added to the true travelled distance.
        rotation_noise : callable or None
            Perturbation added to the true rotation.
        odometry_noise : callable or None
            Perturbation added to both components of the reported odometry.
            Without it, odometry reports exactly the commanded motion.
        """
        self.translation_noise = resolve(translation_noise)
        self.rotation_noise = resolve(rotation_noise)
        self.odometry_noise = resolve(odometry_noise)

    def integrate(self, pose: Vec3, control: Vec2, dt: float) -> Tuple[Vec3, OdometryData]:
        """
        Moves the robot for one tick.

        Parameters
        ----------
        pose : Vec3
            True pose before the tick.
        control : Vec2
            (linear velocity, angular velocity).
        dt : float
            Tick length in seconds.

        Returns
        -------
        new_pose : Vec3
            True pose after the tick, heading wrapped to (-pi, pi].
        odometry : OdometryData
            What odometry reports for this tick.

        Raises
        ------
        InvalidControlError
            If the control contains NaN or infinite values.
        """
        control = check_control(control)
        dt = check_dt(dt)

        ds = control.x * dt
        dtheta = control.y * dt

        true_ds = ds + draw(self.translation_noise, 1)[0]
        true_dtheta = dtheta + draw(self.rotation_noise, 1)[0]
        x, y, theta = update_pose(pose.x, pose.y, pose.theta, true_ds, true_dtheta)
        new_pose = Vec3(x, y, theta)

        odom_ds, odom_dtheta = np.array([ds, dtheta]) + draw(self.odometry_noise, 2)
        odometry = OdometryData(translation=float(odom_ds), rotation=float(odom_dtheta), dt=dt)

        logger.debug("integrate %s with control %s over %.4fs -> %s", pose, control, dt, new_pose)
        return new_pose, odometry

    def __repr__(self):
        return (
            f"MotionModel(translation_noise={self.translation_noise!r}, "
            f"rotation_noise={self.rotation_noise!r}, odometry_noise={self.odometry_noise!r})"
        )
