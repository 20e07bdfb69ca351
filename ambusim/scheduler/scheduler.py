"""Delayed-task scheduler over a simulated clock.

The scheduler keeps every pending ``Timer`` in a heap ordered by deadline
and only moves time forward when ``advance`` is called. Tests call it
directly to fast-forward a journey; in live use the ``RealTimeDriver`` calls
it from a background thread with the wall-clock time that has passed.

Firing model:
    ``advance(dt)`` repeatedly takes the earliest deadline that falls inside
    the window, sets ``now`` to exactly that deadline, and fires every timer
    due at that instant as one batch. Timers scheduled by a callback are
    therefore measured from the moment the callback fired, not from the end
    of the window, so chained stage timers land on exact deadlines however
    coarse the steps.

    A batch runs sequentially on the calling thread, or on a thread pool when
    ``max_workers > 1`` (the same choice the batch loop makes in
    ``execute_parallel``). Callbacks that touch the same unit are serialized
    by the registry's per-unit locks.

Failure handling:
    An exception from a callback is logged and swallowed; other timers in
    the batch still run, and periodic timers stay armed.
"""

from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from datetime import datetime
import heapq
import itertools
import threading

import structlog

from ambusim.timer import Timer, TimerCallback
from ambusim.unit import ClockTime, Second, Time

logger = structlog.get_logger(__name__)

_ZERO_TIME = Second(0.0)


class TimerScheduler:
    """Timer queue driven by an explicitly advanced simulated clock.

    Attributes:
        epoch (datetime): Wall-clock time corresponding to ``ClockTime(0)``.
            Used to render ETAs.
        _now (ClockTime): Current simulated time.
        _heap (list): ``(deadline, sequence, timer)`` entries.
        _executor (ThreadPoolExecutor | None): Pool for batch execution.
    """

    def __init__(self, max_workers: int = 1, epoch: datetime | None = None):
        if max_workers < 1:
            msg = "max_workers must be at least 1"
            raise ValueError(msg)
        self.epoch = epoch or datetime.now()
        self._now = ClockTime(0)
        self._heap: list[tuple[float, int, Timer]] = []
        self._seq = itertools.count()
        self._lock = threading.Lock()
        self._advance_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        if max_workers > 1:
            self._executor = ThreadPoolExecutor(max_workers, "TrackingWorker")
        self._closed = False

    @property
    def now(self) -> ClockTime:
        return self._now

    def wall_time(self, offset: Time | None = None) -> datetime:
        """Wall-clock time at ``now + offset``."""
        elapsed = Second(float(self._now))
        if offset is not None:
            elapsed = elapsed + offset
        return self.epoch + elapsed.to_timedelta()

    def call_later(self, delay: Time, callback: TimerCallback, *, name: str = "") -> Timer:
        """Run ``callback(now)`` once, ``delay`` after the current time."""
        if delay < _ZERO_TIME:
            msg = f"Delay must not be negative, got {delay}"
            raise ValueError(msg)
        timer = Timer(self._now + delay, callback, name=name)
        self._push(timer)
        return timer

    def call_every(
        self,
        interval: Time,
        callback: TimerCallback,
        *,
        name: str = "",
        first_delay: Time | None = None,
    ) -> Timer:
        """Run ``callback(now)`` every ``interval``.

        The first call happens after ``first_delay``, defaulting to one
        interval.
        """
        first = interval if first_delay is None else first_delay
        timer = Timer(self._now + first, callback, interval=interval, name=name)
        self._push(timer)
        return timer

    def pending(self) -> list[Timer]:
        """Pending timers in firing order."""
        with self._lock:
            entries = sorted(self._heap)
        return [timer for _, _, timer in entries if timer.pending]

    def advance(self, dt: Time) -> int:
        """Move the clock forward by ``dt``, firing every timer that falls due.

        Returns:
            int: Number of callbacks run.
        """
        if dt < _ZERO_TIME:
            msg = f"Cannot move the clock backwards by {dt}"
            raise ValueError(msg)

        with self._advance_lock:
            target = float(self._now + dt)
            fired = 0
            while True:
                batch = self._pop_due(target)
                if not batch:
                    break
                self._now = ClockTime(batch[0].deadline)
                self._run_batch(batch)
                fired += len(batch)
                for timer in batch:
                    if timer.periodic and not timer.cancelled:
                        timer._rearm()
                        self._push(timer)
            self._now = ClockTime(target)
            return fired

    def shutdown(self) -> None:
        """Cancel every pending timer and release the worker pool."""
        with self._lock:
            timers = [timer for _, _, timer in self._heap]
            self._heap.clear()
            self._closed = True
        for timer in timers:
            timer.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        logger.debug("Scheduler shut down", cancelled=len(timers))

    def _push(self, timer: Timer) -> None:
        with self._lock:
            if self._closed:
                timer.cancel()
                return
            heapq.heappush(self._heap, (float(timer.deadline), next(self._seq), timer))

    def _pop_due(self, target: float) -> list[Timer]:
        """Pop all live timers sharing the earliest deadline not after ``target``."""
        with self._lock:
            while self._heap and self._heap[0][2].cancelled:
                heapq.heappop(self._heap)
            if not self._heap or self._heap[0][0] > target:
                return []
            deadline = self._heap[0][0]
            batch = []
            while self._heap and self._heap[0][0] == deadline:
                _, _, timer = heapq.heappop(self._heap)
                if not timer.cancelled:
                    batch.append(timer)
            return batch

    def _run_batch(self, batch: list[Timer]) -> None:
        now = self._now

        if self._executor is None or len(batch) == 1:
            for timer in batch:
                self._fire(timer, now)
            return

        futures = [self._executor.submit(self._fire, timer, now) for timer in batch]
        done, _ = wait(futures, return_when=ALL_COMPLETED)
        for future in done:
            future.result()

    @staticmethod
    def _fire(timer: Timer, now: ClockTime) -> None:
        try:
            timer._fire(now)
        except Exception:
            logger.exception("Timer callback failed", timer=timer.name, now=str(now))
