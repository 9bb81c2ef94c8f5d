"""
Default values for the simulator.
Scene files override the robot and laser settings, constructor arguments override the rest.
Units follow the scene: distances in scene units, angles in radians, time in seconds.
"""
import math

# Laser fan
NUM_LASERS = 181
MIN_THETA = -math.pi / 2
MAX_THETA = math.pi / 2
MAX_DISTANCE = 500.0
LASER_DIST_OVER_DIST_VAL = MAX_DISTANCE + 1  # reported for beams without a return

# Robot
ROBOT_LENGTH = 20.0

# Simulation
DEFAULT_DT = 1.0 / 60.0
DEFAULT_RATE_HZ = 60.0

# Determinants below PARALLEL_EPS * segment length count as parallel
PARALLEL_EPS = 1e-12
