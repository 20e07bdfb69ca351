"""Background thread that advances the scheduler with wall-clock time.

The driver turns the fast-forwardable ``TimerScheduler`` into a live
simulation: every ``update_interval`` seconds it measures the real time that
passed, multiplies it by ``time_scale`` and advances the scheduler by that
much. A ``time_scale`` above 1 runs the fleet faster than real time.
"""

import threading
import time

import structlog

from ambusim.unit import Second

from .scheduler import TimerScheduler

logger = structlog.get_logger(__name__)


class RealTimeDriver:
    """Runs ``scheduler.advance`` on a dedicated thread.

    Threading Architecture:
    - Driver thread: measures elapsed time and advances the scheduler
    - Scheduler pool (optional): runs timer batches in parallel
    - Caller threads: dispatch and query, never blocked by the driver
    """

    def __init__(
        self,
        scheduler: TimerScheduler,
        update_interval: float = 0.1,
        time_scale: float = 1.0,
    ):
        if update_interval <= 0:
            msg = "update_interval must be positive"
            raise ValueError(msg)
        if time_scale <= 0:
            msg = "time_scale must be positive"
            raise ValueError(msg)
        self.scheduler = scheduler
        self.update_interval = update_interval
        self.time_scale = time_scale

        self.running = False
        self.paused = False
        self.main_thread: threading.Thread | None = None

        self.pause_event = threading.Event()
        self.shutdown_event = threading.Event()

    def start(self) -> None:
        """Start the driver thread. Does nothing when already running."""
        if self.running:
            return

        self.running = True
        self.shutdown_event.clear()
        self.pause_event.set()

        self.main_thread = threading.Thread(
            target=self._simulation_loop, name="TrackingClock", daemon=True
        )
        self.main_thread.start()
        logger.info(
            "Real-time driver started",
            update_interval=self.update_interval,
            time_scale=self.time_scale,
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the driver thread and wait for it to exit."""
        if not self.running:
            return

        self.running = False
        self.shutdown_event.set()
        self.pause_event.set()

        if self.main_thread and self.main_thread.is_alive():
            self.main_thread.join(timeout=timeout)
        logger.info("Real-time driver stopped", now=str(self.scheduler.now))

    def pause(self) -> None:
        """Freeze simulated time until ``resume`` is called."""
        self.paused = True
        self.pause_event.clear()

    def resume(self) -> None:
        self.paused = False
        self.pause_event.set()

    def _simulation_loop(self) -> None:
        last_update = time.monotonic()

        while self.running and not self.shutdown_event.is_set():
            if not self.pause_event.is_set():
                self.pause_event.wait()
                # Time spent paused does not count.
                last_update = time.monotonic()
                continue

            if self.shutdown_event.wait(self.update_interval):
                break

            current_time = time.monotonic()
            real_dt = current_time - last_update
            last_update = current_time

            try:
                self.scheduler.advance(Second(real_dt * self.time_scale))
            except Exception:
                logger.exception("Simulation step failed, stopping driver")
                self.running = False
                break
