"""
Vectorized ray casting and collision helpers working on world arrays.

A world array is a 2D numpy array with shape n by 4 in the format [[x1,y1,x2,y2], ... ],
one row per wall.
"""
import numpy as np

from .config import PARALLEL_EPS


def rotate(angle, vec):
    ca = np.cos(angle)
    sa = np.sin(angle)
    return np.array([[ca, -sa], [sa, ca]]) @ vec


def _cross2(a, b):
    # z-component of the cross product of 2D vectors, broadcasting over leading axes
    return a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]


def shoot_lasers(laser_pos, theta, lasers, world, max_value=np.inf):
    """
    Casts laser beams from a single position against all walls.
    Both the distances of the beams and the points where they hit
    a wall are returned; the latter are handy for drawing.

    Parameters
    ----------
    laser_pos : ndarray
        Position the beams start from, shape (2,).
    theta : float
        Current heading of the robot.
    lasers : ndarray
        Beam angles relative to the heading.
    world : ndarray
        Walls in the format [ [x1,y1, x2,y2], ... ].
    max_value : float
        Distance reported for beams that hit nothing.

    Returns
    -------
    laser_distances : ndarray
        Distance per beam, in the order of `lasers`.
    hitpoints : ndarray
        Points where the beams hit a wall, shape (len(lasers), 2).

    Examples
    --------
    >>> laser_distances, hitpoints = shoot_lasers(laser_pos, pose.theta, angles, scene.walls)
    laser_distances now holds as many entries as angles
    """
    laser_pos = np.asarray(laser_pos, dtype=np.float64)
    assert (
        len(laser_pos.shape) == 1 and laser_pos.shape[0] == 2
    ), "laser_pos should be an ndarray with exactly two entries (position along x and y axis)"
    world = np.asarray(world, dtype=np.float64).reshape(-1, 4)
    angle = theta + np.asarray(lasers, dtype=np.float64)
    ray_direction = np.stack((np.cos(angle), np.sin(angle)), -1)  # k, 2
    line_start = world[:, :2]  # n, 2
    line_end = world[:, 2:]  # n, 2
    v1 = laser_pos - line_start  # n, 2
    v2 = line_end - line_start  # n, 2
    v3 = np.stack((-ray_direction[:, 1], ray_direction[:, 0]), 0)  # 2, k

    dot = v2 @ v3  # n, k
    not_parallel = np.abs(dot) > PARALLEL_EPS * np.linalg.norm(v2, axis=-1)[:, None]
    t1 = np.divide(
        np.expand_dims(_cross2(v2, v1), -1),
        dot,
        out=-np.ones_like(dot),
        where=not_parallel,
    )
    t2 = np.divide(v1 @ v3, dot, out=-np.ones_like(dot), where=not_parallel)

    first = t1 >= 0.0
    second = np.logical_and(t2 >= 0.0, t2 <= 1.0)
    does_intersect = np.logical_and(first, second)
    distances = np.min(t1, 0, initial=max_value, where=does_intersect)
    hitpoints = (
        np.expand_dims(laser_pos, 0) + np.expand_dims(distances, -1) * ray_direction
    )
    return distances, hitpoints


def shoot_multiple_lasers(laser_pos, theta, lasers, world, max_value=np.inf):
    """
    Same as `shoot_lasers`, but for m positions at once.

    Parameters
    ----------
    laser_pos : ndarray
        Beam origins, shape (m, 2).
    theta : ndarray
        Headings, shape (m,).
    lasers : ndarray
        Beam angles relative to the heading, shape (k,).
    world : ndarray
        Walls in the format [ [x1,y1, x2,y2], ... ].
    max_value : float
        Distance reported for beams that hit nothing.

    Returns
    -------
    distances : ndarray
        Shape (m, k).
    hitpoints : ndarray
        Shape (m, k, 2).
    """
    laser_pos = np.asarray(laser_pos, dtype=np.float64).reshape(-1, 2)
    world = np.asarray(world, dtype=np.float64).reshape(-1, 4)
    angle = np.add.outer(np.asarray(theta, dtype=np.float64), lasers)
    ray_direction = np.stack((np.cos(angle), np.sin(angle)), -1)  # m, k, 2
    line_start = world[:, :2]  # n, 2
    line_end = world[:, 2:]  # n, 2
    v1 = laser_pos[:, None, :] - line_start[None, :, :]  # m, n, 2
    v2 = line_end - line_start  # n, 2
    v3 = np.stack((-ray_direction[..., 1], ray_direction[..., 0]), -1)  # m, k, 2

    dot = np.transpose(v3 @ v2.T, [0, 2, 1])  # m, n, k
    not_parallel = (
        np.abs(dot) > PARALLEL_EPS * np.linalg.norm(v2, axis=-1)[None, :, None]
    )
    t1 = np.divide(
        np.expand_dims(_cross2(v2[None, :, :], v1), -1),
        dot,
        out=-np.ones_like(dot),
        where=not_parallel,
    )
    t2 = np.divide(
        v1 @ np.transpose(v3, [0, 2, 1]),
        dot,
        out=-np.ones_like(dot),
        where=not_parallel,
    )

    first = t1 >= 0.0
    second = np.logical_and(t2 >= 0.0, t2 <= 1.0)
    does_intersect = np.logical_and(first, second)
    distances = np.min(t1, 1, initial=max_value, where=does_intersect)
    hitpoints = laser_pos[:, None, :] + distances[:, :, None] * ray_direction
    return distances, hitpoints


def collision(world, robot_enclosure, robot_state):
    """
    Checks whether any edge of the robot enclosure crosses a wall.

    Parameters
    ----------
    world : ndarray
        Walls in the format [ [x1,y1, x2,y2], ... ].
    robot_enclosure : ndarray
        Robot hull edges in robot coordinates, same format as `world`.
    robot_state : ndarray
        Pose [x, y, theta] of the robot.

    Returns
    -------
    bool
    """
    world = np.asarray(world, dtype=np.float64).reshape(-1, 4)
    robot_enclosure = np.asarray(robot_enclosure, dtype=np.float64).reshape(-1, 4)
    robot_pos, robot_theta = robot_state[:2], robot_state[2]

    w0_x, w0_y = world[:, 0], world[:, 1]
    w1_x, w1_y = world[:, 2], world[:, 3]

    # Rotate and move
    s_theta = np.sin(robot_theta)
    c_theta = np.cos(robot_theta)
    p2_x = (
        c_theta * robot_enclosure[:, 0] - s_theta * robot_enclosure[:, 1] + robot_pos[0]
    )
    p2_y = (
        s_theta * robot_enclosure[:, 0] + c_theta * robot_enclosure[:, 1] + robot_pos[1]
    )
    p3_x = (
        c_theta * robot_enclosure[:, 2] - s_theta * robot_enclosure[:, 3] + robot_pos[0]
    )
    p3_y = (
        s_theta * robot_enclosure[:, 2] + c_theta * robot_enclosure[:, 3] + robot_pos[1]
    )

    s1_x = w1_x - w0_x
    s1_y = w1_y - w0_y
    s2_x = p3_x - p2_x
    s2_y = p3_y - p2_y
    den = -s2_x[None, :] * s1_y[:, None] + s1_x[:, None] * s2_y[None, :]

    s_num = -s1_y[:, None] * np.subtract.outer(w0_x, p2_x) + s1_x[
        :, None
    ] * np.subtract.outer(w0_y, p2_y)
    t_num = s2_x[None, :] * np.subtract.outer(w0_y, p2_y) - s2_y[
        None, :
    ] * np.subtract.outer(w0_x, p2_x)
    den_not_zero = den != 0

    s = np.divide(s_num, den, out=-np.ones_like(den), where=den_not_zero)
    t = np.divide(t_num, den, out=-np.ones_like(den), where=den_not_zero)
    s_cond = np.logical_and(s >= 0.0, s <= 1.0)
    t_cond = np.logical_and(t >= 0.0, t <= 1.0)
    does_intersect = np.logical_and(s_cond, t_cond)

    return bool(np.any(np.logical_and(does_intersect, den_not_zero)))


def compute_world_bounds(world):
    """
    Axis-aligned extent of all walls.

    Returns
    -------
    (min_x, min_y, max_x, max_y) : tuple of float
        All zero for an empty world.
    """
    world = np.asarray(world, dtype=np.float64).reshape(-1, 4)
    if world.shape[0] == 0:
        return 0.0, 0.0, 0.0, 0.0
    all_x = np.concatenate([world[:, 0], world[:, 2]], -1)
    all_y = np.concatenate([world[:, 1], world[:, 3]], -1)
    return (
        float(np.min(all_x)),
        float(np.min(all_y)),
        float(np.max(all_x)),
        float(np.max(all_y)),
    )
