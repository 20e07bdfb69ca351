"""Fleet units and the registry that owns their state.

Exports:
    Unit: Frozen snapshot of one emergency vehicle
    UnitStatus: Lifecycle states
    DispatchRequest: Pickup request consumed by dispatch
    UnitRegistry: Per-unit locked store of snapshots
    default_fleet: The three-unit demo fleet
"""

from .registry import DEFAULT_FLEET, UnitRegistry, UnitUpdate, default_fleet
from .unit import DispatchRequest, Unit, UnitStatus

__all__ = [
    "Unit",
    "UnitStatus",
    "DispatchRequest",
    "UnitRegistry",
    "UnitUpdate",
    "DEFAULT_FLEET",
    "default_fleet",
]
