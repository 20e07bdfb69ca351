"""Float-backed measurements with SI storage and family checking.

``UnitFloat`` stores its value in the SI unit of its family and converts on
construction, so ``Minute(10)`` and ``Second(600)`` are the same float. Only
members of one family can be added, subtracted or compared; scalars can
scale a measurement.

Example:
    >>> class Second(UnitFloat):
    ...     IS_FAMILY_ROOT = True
    ...     SYMBOL = "s"
    >>> class Minute(Second):
    ...     SCALE_TO_SI = 60.0
    ...     SYMBOL = "min"
    >>> float(Minute(1.5))
    90.0
"""

from __future__ import annotations

from typing import ClassVar

from .unit_base import Quantity

Number = int | float


class UnitFloat(float, Quantity):
    """Base class for type-safe measurements with automatic SI conversion.

    Attributes:
        SCALE_TO_SI (ClassVar[float]): Factor from the native scale to SI.
        IS_FAMILY_ROOT (ClassVar[bool]): Marks the root of a family.
    """

    SCALE_TO_SI: ClassVar[float] = 1.0
    IS_FAMILY_ROOT: ClassVar[bool] = True

    def __new__(cls, value: Number):
        """Create a measurement from a value in the class's native scale."""
        si_val = float(value) * cls.SCALE_TO_SI
        return float.__new__(cls, si_val)

    @classmethod
    def from_si(cls, si_value: float) -> UnitFloat:
        """Create a measurement from a value already expressed in SI."""
        return float.__new__(cls, si_value)

    def to(self, unit_type: type[UnitFloat]) -> float:
        """Return the plain value expressed in ``unit_type``'s scale.

        Raises:
            TypeError: If ``unit_type`` belongs to another family.
        """
        self._check_same_root(unit_type)
        return float(self) / unit_type.SCALE_TO_SI

    # -------------------------------- Arithmetic Operations --------------------------------

    def __add__(self, other: UnitFloat) -> UnitFloat:
        self._check_same_root(type(other))
        return type(self).from_si(float(self) + float(other))

    def __radd__(self, other: UnitFloat) -> UnitFloat:
        return self.__add__(other)

    def __sub__(self, other: UnitFloat) -> UnitFloat:
        self._check_same_root(type(other))
        return type(self).from_si(float(self) - float(other))

    def __mul__(self, k: Number) -> UnitFloat:
        if isinstance(k, Number):
            return type(self).from_si(float(self) * float(k))
        raise TypeError

    def __rmul__(self, k: Number) -> UnitFloat:
        return self.__mul__(k)

    def __truediv__(self, k: Number) -> UnitFloat:
        if isinstance(k, Number):
            return type(self).from_si(float(self) / float(k))
        raise TypeError

    def __neg__(self) -> UnitFloat:
        return type(self).from_si(-float(self))

    # -------------------------------- Comparison Operations --------------------------------

    def __lt__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) < float(other)

    def __le__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) <= float(other)

    def __gt__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) > float(other)

    def __ge__(self, other: UnitFloat) -> bool:
        self._check_same_root(type(other))
        return float(self) >= float(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnitFloat):
            return NotImplemented
        self._check_same_root(type(other))
        return float(self) == float(other)

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, UnitFloat):
            return NotImplemented
        self._check_same_root(type(other))
        return float(self) != float(other)

    def __hash__(self) -> int:
        # Frozen dataclasses holding measurements as defaults must stay hashable.
        return float.__hash__(self)

    def __str__(self) -> str:
        return f"{self.to(type(self)):g} {type(self).SYMBOL}".strip()

    def __repr__(self) -> str:
        return f"{self.to(type(self)):g} {type(self).SYMBOL} (= {float(self):g} SI)"
