"""Authoritative in-memory store of fleet units.

The registry holds the current ``Unit`` snapshot for every id and is the only
place unit state is written. Each unit has its own lock: writes to different
units never wait on each other, writes to the same unit are serialized.
Because snapshots are frozen, reads need no lock and always return values
the caller cannot mutate.

``update`` is the write path used by the engine: it runs read, compute and
write for one unit under that unit's lock, so a motion tick and a stage
timer landing on the same unit at the same instant cannot lose either
change.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import threading

import structlog

from ambusim.events import UNIT_UPDATED, EventBus
from ambusim.geo import GeoPoint

from .unit import Unit

logger = structlog.get_logger(__name__)

UnitUpdate = Callable[[Unit], Unit | None]

# Mock fleet the demo starts with.
DEFAULT_FLEET: tuple[tuple[str, str, float, float], ...] = (
    ("amb-1", "Dave Driver", 40.7128, -74.006),
    ("amb-2", "Sarah Smith", 40.7148, -74.008),
    ("amb-3", "Mike Johnson", 40.7138, -74.002),
)


def default_fleet() -> list[Unit]:
    """Create the three-unit demo fleet, all available."""
    return [
        Unit(id=unit_id, operator_name=name, location=GeoPoint.from_deg(lat, lon))
        for unit_id, name, lat, lon in DEFAULT_FLEET
    ]


class UnitRegistry:
    """Per-unit locked store of ``Unit`` snapshots in registration order.

    Attributes:
        _units (dict[str, Unit]): Current snapshot per id.
        _locks (dict[str, threading.Lock]): One lock per id.
        _events (EventBus): Receives ``unit_updated`` after each write.
    """

    def __init__(self, units: Iterable[Unit], events: EventBus | None = None):
        self._units: dict[str, Unit] = {}
        self._locks: dict[str, threading.Lock] = {}
        for unit in units:
            if unit.id in self._units:
                msg = f"Duplicate unit id {unit.id!r}"
                raise ValueError(msg)
            self._units[unit.id] = unit
            self._locks[unit.id] = threading.Lock()
        self._events = events or EventBus()
        logger.debug("Registry initialized", units=len(self._units))

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    def ids(self) -> list[str]:
        return list(self._units)

    def list(self) -> list[Unit]:
        """Snapshot of all units in registration order."""
        return list(self._units.values())

    def get(self, unit_id: str) -> Unit | None:
        return self._units.get(unit_id)

    def replace(self, unit_id: str, unit: Unit) -> Unit:
        """Overwrite the snapshot for ``unit_id``.

        Raises:
            KeyError: If the id is not registered.
            ValueError: If ``unit.id`` does not match ``unit_id``.
        """
        if unit.id != unit_id:
            msg = f"Cannot store unit {unit.id!r} under id {unit_id!r}"
            raise ValueError(msg)
        lock = self._locks[unit_id]
        with lock:
            self._units[unit_id] = unit
        self._events.emit_event(UNIT_UPDATED, unit)
        return unit

    def update(self, unit_id: str, fn: UnitUpdate) -> Unit | None:
        """Atomically replace a unit with ``fn(current)``.

        ``fn`` runs under the unit's lock with the freshest snapshot. If it
        returns None nothing is written; if it raises, nothing is written and
        the exception propagates.

        Returns:
            Unit | None: The newly written snapshot, or None when the id is
            unknown or ``fn`` declined to write.
        """
        lock = self._locks.get(unit_id)
        if lock is None:
            return None
        with lock:
            current = self._units[unit_id]
            updated = fn(current)
            if updated is None:
                return None
            if updated.id != unit_id:
                msg = f"Update for {unit_id!r} returned unit {updated.id!r}"
                raise ValueError(msg)
            self._units[unit_id] = updated
        self._events.emit_event(UNIT_UPDATED, updated)
        return updated
