"""
Background driver that ticks a simulator at a fixed rate, for drivers whose render loop
runs on a different thread than the simulation.
"""
import logging
import threading
import time

from .config import DEFAULT_RATE_HZ

logger = logging.getLogger(__name__)


class SimulationLoop:
    def __init__(self, simulator, rate_hz: float = DEFAULT_RATE_HZ, fixed_timestep: bool = True):
        """
        Parameters
        ----------
        simulator : Simulator
            Must have been created with ``thread_safe=True``.
        rate_hz : float
            Ticks per second.
        fixed_timestep : bool
            Whether or not a fixed timestep is used for simulation.
            If true, every tick advances the simulator by its own `dt`.
            If this setting is false, the wall clock time since the previous tick is used,
            so velocities are in units per second of real time.
        """
        if not simulator.thread_safe:
            raise ValueError("SimulationLoop needs a simulator created with thread_safe=True")
        if not rate_hz > 0:
            raise ValueError(f"rate_hz must be positive, got {rate_hz}")
        self.simulator = simulator
        self.period = 1.0 / rate_hz
        self.fixed_timestep = fixed_timestep
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "SimulationLoop":
        if self.running:
            raise RuntimeError("SimulationLoop is already running")
        # each thread gets its own event so a late thread never sees a cleared stop flag
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop,), name="scansimpy-loop", daemon=True)
        self._thread.start()
        logger.info("Simulation loop started at %.1f Hz", 1.0 / self.period)
        return self

    def stop(self, timeout: float = None) -> None:
        """
        Asks the loop to stop and waits up to `timeout` seconds for the current tick to finish.
        If the thread is still alive afterwards the loop keeps counting as running,
        so it cannot be started a second time; call `stop` again to wait for it.
        """
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Simulation loop did not stop within %s s", timeout)
                return
            self._thread = None
        logger.info("Simulation loop stopped after %d ticks", self.simulator.tick_count)

    def _run(self, stop):
        prev_time = time.perf_counter()
        next_tick = prev_time
        while not stop.is_set():
            current_time = time.perf_counter()
            if self.fixed_timestep:
                self.simulator.tick()
            else:
                self.simulator.tick(current_time - prev_time)
            prev_time = current_time

            next_tick += self.period
            delay = next_tick - time.perf_counter()
            if delay < 0:
                # fell behind, don't try to catch up
                next_tick = time.perf_counter()
                delay = 0
            stop.wait(delay)

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
