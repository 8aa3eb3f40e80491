"""Simulation update service - ticks the telemetry simulator on a fixed interval"""

import threading
import traceback


class SimulationUpdateService:
    """
    Background driver for TelemetrySimulator.update_simulation().

    One daemon thread, one tick per interval. A tick that raises is printed
    and counted; the loop keeps going. stop() wakes the thread out of its
    wait, so shutdown takes at most the duration of a single tick.
    """

    DEFAULT_INTERVAL = 5.0  # seconds

    def __init__(self, simulator, interval=DEFAULT_INTERVAL):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.simulator = simulator
        self.interval = float(interval)
        self.error_count = 0
        self.tick_count = 0
        self._stop_event = threading.Event()
        self._thread = None

    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    def run_once(self):
        """Run a single guarded tick. Returns False if the tick raised."""
        try:
            self.simulator.update_simulation()
        except Exception as exc:
            self.error_count += 1
            print(f"[SIM] Error updating simulation: {exc}", flush=True)
            traceback.print_exc()
            return False
        self.tick_count += 1
        return True

    def _loop(self, stop_event):
        print(f"[SIM] Simulation update service starting ({self.interval:g}s interval)", flush=True)
        while not stop_event.is_set():
            self.run_once()
            stop_event.wait(self.interval)
        print("[SIM] Simulation update service stopping", flush=True)

    # ========== LIFECYCLE ==========

    def start(self):
        if self.is_running():
            return
        # each run gets its own event, so a thread that outlived stop() cannot be revived
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, args=(self._stop_event,), name="simulation-update", daemon=True
        )
        self._thread.start()

    def stop(self, timeout=1.0):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        self._thread = None
