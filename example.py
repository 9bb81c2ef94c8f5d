import logging
import sys

import numpy as np

from scansimpy import Simulator, Vec2, gaussian, load_world
from scansimpy.laser import LaserModel
from scansimpy.motion import MotionModel
from scansimpy.sensing import RansacLineExtractor

# Key bindings of the interactive viewer, reused here for a scripted drive.
CONTROLS = {
    "p": Vec2.zero(),
    "up": Vec2(50.0, 0.0),
    "down": Vec2(-50.0, 0.0),
    "left": Vec2(0.0, -0.5),
    "right": Vec2(0.0, 0.5),
}

# (key, number of frames the key is held)
SCRIPT = [("up", 120), ("right", 60), ("up", 90), ("left", 30), ("p", 10)]

# The world is loaded from a file given on the command line, or from the package.
if len(sys.argv) > 1:
    scene_source = sys.argv[1]
else:
    scene_source = load_world("simple_rectangle.json")

# A simulator with slightly noisy motion and laser, so that odometry and true pose drift apart.
sim = Simulator(
    scene_source,
    motion_model=MotionModel(translation_noise=gaussian(0.05, seed=1), rotation_noise=gaussian(0.002, seed=2)),
    laser_model=LaserModel(range_noise=gaussian(1.0, seed=3)),
    collisions=True,
)
extractor = RansacLineExtractor(seed=4)


# The main function of the simulation. Gets called once per frame with the keys currently pressed.
def state_update(sim: Simulator, inputs, dead_reckoning):
    for key in inputs:
        sim.send_control(CONTROLS[key])
    sim.tick()

    pose, odom, scan = sim.get_readings()

    # Dead reckoning from odometry, with the same path integration as the simulator.
    x, y, theta = dead_reckoning
    mid = theta + odom.rotation / 2.0
    dead_reckoning[:] = [x + odom.translation * np.cos(mid), y + odom.translation * np.sin(mid), theta + odom.rotation]
    return pose, scan


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    start = sim.get_true_pose()
    dead_reckoning = start.as_array()
    frame = 0
    for key, frames in SCRIPT:
        for _ in range(frames):
            pose, scan = state_update(sim, [key], dead_reckoning)
            frame += 1
            if frame % 60 == 0:
                hits = scan.hits()
                print(
                    f"frame {frame}: pose=({pose.x:.1f}, {pose.y:.1f}, {pose.theta:.2f}) "
                    f"odometry=({dead_reckoning[0]:.1f}, {dead_reckoning[1]:.1f}, {dead_reckoning[2]:.2f}) "
                    f"hits={int(hits.sum())}/{sim.num_lasers} nearest={scan.lengths[hits].min(initial=np.inf):.1f}"
                )

    pose, _, scan = sim.get_readings()
    result = extractor.extract(scan, pose, sim.scene)
    print(f"Extracted {len(result.lines)} walls and {len(result.landmarks)} landmarks from the last scan")
    for line in result.lines:
        print(f"  ({line.p1.x:.1f}, {line.p1.y:.1f}) - ({line.p2.x:.1f}, {line.p2.y:.1f})")
    print(f"Collisions: {len(sim.collision_points)}")
