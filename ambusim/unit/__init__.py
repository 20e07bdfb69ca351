"""Type-safe measurements for the tracking engine.

Durations (stage delays, ETA legs, tick periods) and angles (coordinates and
motion offsets) are float subclasses that remember their quantity family.
Values are stored in SI and operations between families are rejected.

Modules:
    unit_base: ``Quantity`` family bookkeeping
    unit_float: ``UnitFloat`` arithmetic and comparisons
    unit_time: ``Second``, ``Minute``, ``ClockTime``
    unit_angle: ``Radian``, ``Degree``

Example:
    >>> from ambusim.unit import Minute, Second
    >>> Second(30) + Minute(1)
    90 s (= 90 SI)
"""

from .unit_angle import Angle, Degree, Radian
from .unit_base import Quantity
from .unit_float import UnitFloat
from .unit_time import ClockTime, Minute, Second, Time

__all__ = [
    "Quantity",
    "UnitFloat",
    "Radian",
    "Degree",
    "Angle",
    "Second",
    "Minute",
    "ClockTime",
    "Time",
]
