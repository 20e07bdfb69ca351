"""Timer handles for scheduled stage transitions and periodic ticks.

A Timer is created by the ``TimerScheduler`` and never directly by callers.
It records when it is due on the scheduler's simulated clock, what to call,
and for periodic timers the interval to the next firing. Holding a Timer
lets the owner check whether it is still pending or cancel it.

Lifecycle:
    1. Creation: ``scheduler.call_later(delay, fn)`` or ``call_every(interval, fn)``
    2. Firing: the scheduler calls ``fn(now)`` once the clock reaches ``deadline``
    3. Re-arming: periodic timers move ``deadline`` forward by ``interval``
    4. Completion: one-shot timers are done after firing; any timer is done once cancelled

Example:
    >>> timer = scheduler.call_later(Second(10), on_arrival, name="amb-1:arrived_pickup")
    >>> timer.pending
    True
    >>> timer.cancel()
    >>> timer.done
    True
"""

from __future__ import annotations

from collections.abc import Callable

from ambusim.unit import ClockTime, Second, Time

TimerCallback = Callable[[ClockTime], None]

_ZERO_TIME = Second(0.0)


class Timer:
    """A one-shot or periodic callback due at a point on the simulated clock.

    Note:
        Timer instances are not reused. A stage that needs another delay
        gets a new Timer from the scheduler.

    Attributes:
        _deadline (ClockTime): Clock reading at which the timer fires next.
        _interval (Time | None): Period for repeating timers.
        _callback (TimerCallback): Called with the firing time.
        name (str): Label used in logs.
    """

    _deadline: ClockTime
    _interval: Time | None

    def __init__(
        self,
        deadline: ClockTime,
        callback: TimerCallback,
        interval: Time | None = None,
        name: str = "",
    ) -> None:
        if interval is not None and interval <= _ZERO_TIME:
            msg = f"Periodic timer interval must be positive, got {interval}"
            raise ValueError(msg)
        self._deadline = deadline
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self._fired = 0
        self.name = name

    @property
    def deadline(self) -> ClockTime:
        return self._deadline

    @property
    def interval(self) -> Time | None:
        return self._interval

    @property
    def periodic(self) -> bool:
        return self._interval is not None

    @property
    def fired(self) -> int:
        """Number of times the callback has run."""
        return self._fired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        """True once cancelled, or once a one-shot timer has fired."""
        if self._cancelled:
            return True
        return not self.periodic and self._fired > 0

    @property
    def pending(self) -> bool:
        return not self.done

    def remaining(self, now: ClockTime) -> Time:
        """Time left until the next firing, never negative."""
        left = Second(float(self._deadline) - float(now))
        return max(left, _ZERO_TIME)

    def cancel(self) -> None:
        """Stop the timer from firing again. Safe to call repeatedly."""
        self._cancelled = True

    def _fire(self, now: ClockTime) -> None:
        self._fired += 1
        self._callback(now)

    def _rearm(self) -> None:
        self._deadline = self._deadline + self._interval

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else ("done" if self.done else "pending")
        return f"Timer({self.name or '?'} @ {self._deadline}, {state})"
