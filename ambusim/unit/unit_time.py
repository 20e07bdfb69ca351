"""Time measurements used for stage delays, tick periods and ETA legs.

All time units share ``Second`` as their family root, so a ``Minute`` leg can
be added to a ``ClockTime`` reading directly.

Classes:
    Second: SI base unit for durations.
    Minute: 60 seconds.
    ClockTime: Elapsed simulation time, rendered as ``HH:MM:SS.mmm``.

Type Aliases:
    Time: Union of all time units.

Example:
    >>> pickup_leg = Minute(10)
    >>> float(pickup_leg)
    600.0
    >>> str(ClockTime(45) + Second(15))
    '00:01:00.000'
"""

from __future__ import annotations

from datetime import timedelta
from math import isfinite

from .unit_float import UnitFloat


class Second(UnitFloat):
    """Time unit: Second (SI base unit for time)."""

    IS_FAMILY_ROOT = True
    SCALE_TO_SI = 1.0
    SYMBOL = "s"

    def to_timedelta(self) -> timedelta:
        """Return this duration as a ``datetime.timedelta``."""
        return timedelta(seconds=float(self))


class Minute(Second):
    """Time unit: Minute (60 seconds)."""

    SCALE_TO_SI = 60.0
    SYMBOL = "min"


class ClockTime(Second):
    """Elapsed simulation time since the scheduler's epoch.

    ClockTime is what the timer scheduler reports as ``now``. It is stored in
    seconds like every other time unit but prints as a clock reading.

    Example:
        >>> str(ClockTime(3725.5))
        '01:02:05.500'
    """

    SCALE_TO_SI = 1.0

    @classmethod
    def from_str(cls, time_str: str) -> ClockTime:
        """Parse a ``HH:MM:SS`` string."""
        h, m, s = map(float, time_str.split(":"))
        return cls(h * 3600 + m * 60 + s)

    def __str__(self) -> str:
        if not isfinite(float(self)):
            return "--:--:--"
        h, r = divmod(float(self), 3600)
        m, s = divmod(r, 60)
        return f"{int(h):02d}:{int(m):02d}:{s:06.3f}"

    def __repr__(self) -> str:
        return f"{str(self)} (= {float(self):g} {self.ROOT.SYMBOL})"


Time = Second | Minute | ClockTime
