"""Angular measurements for geographic coordinates.

Angles are stored in radians (SI) and usually created in degrees, the scale
unit positions and motion offsets are expressed in.

Example:
    >>> Degree(180).to(Radian)
    3.141592653589793
    >>> Degree(0.0005).to(Degree)
    0.0005
"""

from __future__ import annotations

from math import pi

from .unit_float import UnitFloat


class Radian(UnitFloat):
    """Angular unit: Radian (SI base unit for angles)."""

    IS_FAMILY_ROOT = True
    SCALE_TO_SI = 1.0
    SYMBOL = "rad"


class Degree(Radian):
    """Angular unit: Degree (1/360 of a full rotation)."""

    SCALE_TO_SI = pi / 180.0
    SYMBOL = "°"


Angle = Radian | Degree
