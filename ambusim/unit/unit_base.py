"""Quantity family foundation for the simulation's measurement types.

Every measured value handled by the engine (stage delays, ETA legs, tick
periods, coordinate offsets) is a float subclass tagged with the physical
quantity it belongs to. Classes sharing a family root can be added, compared
and converted; mixing families (seconds with degrees) raises ``TypeError``.

Key Concepts:
- ROOT: the class that defines a family, found automatically through the MRO
- IS_FAMILY_ROOT: flag marking the root class of a family
- SYMBOL: display suffix used in string representations

Example:
    >>> class Duration(Quantity):
    ...     IS_FAMILY_ROOT = True
    >>> class Shift(Duration):
    ...     pass  # ROOT = Duration
"""

from __future__ import annotations

from typing import ClassVar

Number = int | float


class Quantity:
    """Base class for all measurement types in the simulation.

    Concrete measurement classes inherit from ``UnitFloat``; this class only
    carries the family bookkeeping.

    Attributes:
        ROOT (ClassVar[type[Quantity]]): Root class defining the family.
        SYMBOL (ClassVar[str]): Display symbol.
        IS_FAMILY_ROOT (ClassVar[bool]): Marks the root of a family.
    """

    __slots__ = ()

    ROOT: ClassVar[type[Quantity]]
    SYMBOL: ClassVar[str] = ""
    IS_FAMILY_ROOT: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        if "ROOT" in cls.__dict__ and cls.ROOT is not None:
            return

        if cls.__dict__.get("IS_FAMILY_ROOT", False):
            cls.ROOT = cls
            return

        for base in cls.mro()[1:]:
            if base.__dict__.get("IS_FAMILY_ROOT", False):
                cls.ROOT = base
                return

        cls.ROOT = cls

    @classmethod
    def _check_same_root(cls, other_type: type) -> None:
        """Reject operations between different quantity families.

        Raises:
            TypeError: If ``other_type`` is not a quantity of the same family.
        """
        other_root = getattr(other_type, "ROOT", None)
        if cls.ROOT is not other_root:
            msg = f"Incompatible quantities: {cls.ROOT.__name__} and {other_type.__name__}"
            raise TypeError(msg)
