"""
Tests for the background simulation loop.
"""
import threading
import time

import pytest

from scansimpy import SimulationLoop, Simulator, Vec2, Vec3


def wait_for(condition, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return False


class TestSimulationLoop:
    def test_requires_thread_safe_simulator(self, one_wall_scene):
        with pytest.raises(ValueError):
            SimulationLoop(Simulator(one_wall_scene))

    def test_rejects_bad_rate(self, one_wall_scene):
        with pytest.raises(ValueError):
            SimulationLoop(Simulator(one_wall_scene, thread_safe=True), rate_hz=0)

    def test_ticks_in_background(self, one_wall_scene):
        sim = Simulator(one_wall_scene, thread_safe=True)
        loop = SimulationLoop(sim, rate_hz=200.0)
        loop.start()
        try:
            assert loop.running
            assert wait_for(lambda: sim.tick_count >= 3)
        finally:
            loop.stop(timeout=1.0)
        assert not loop.running
        ticks = sim.tick_count
        time.sleep(0.05)
        assert sim.tick_count == ticks

    def test_fixed_timestep_applies_control(self, one_wall_scene):
        sim = Simulator(one_wall_scene, thread_safe=True, dt=0.5)
        with SimulationLoop(sim, rate_hz=200.0):
            sim.send_control(Vec2(2.0, 0.0))
            assert wait_for(lambda: sim.get_true_pose() != Vec3.zero())
        assert sim.get_true_pose().x == pytest.approx(1.0)

    def test_wall_clock_timestep(self, one_wall_scene):
        sim = Simulator(one_wall_scene, thread_safe=True)
        with SimulationLoop(sim, rate_hz=100.0, fixed_timestep=False):
            assert wait_for(lambda: sim.tick_count >= 3)
        assert sim.get_odometry().dt > 0.0

    def test_cannot_start_twice(self, one_wall_scene):
        sim = Simulator(one_wall_scene, thread_safe=True)
        with SimulationLoop(sim, rate_hz=100.0) as loop:
            with pytest.raises(RuntimeError):
                loop.start()

    def test_timed_out_stop_blocks_restart(self, one_wall_scene):
        sim = Simulator(one_wall_scene, thread_safe=True)
        fast_tick = sim.tick

        def slow_tick(dt=None):
            time.sleep(0.2)
            fast_tick(dt)

        sim.tick = slow_tick
        loop = SimulationLoop(sim, rate_hz=100.0)
        loop.start()
        time.sleep(0.05)
        loop.stop(timeout=0.01)

        # the tick in progress still holds the thread
        assert loop.running
        with pytest.raises(RuntimeError):
            loop.start()

        loop.stop(timeout=2.0)
        assert not loop.running
        loop_threads = [t for t in threading.enumerate() if t.name == "scansimpy-loop"]
        assert loop_threads == []

    def test_restart_after_stop(self, one_wall_scene):
        sim = Simulator(one_wall_scene, thread_safe=True)
        loop = SimulationLoop(sim, rate_hz=200.0)
        loop.start()
        loop.stop(timeout=1.0)
        ticks = sim.tick_count
        with loop:
            assert wait_for(lambda: sim.tick_count > ticks)
            assert len([t for t in threading.enumerate() if t.name == "scansimpy-loop"]) == 1
