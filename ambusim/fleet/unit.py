"""Fleet unit records and their lifecycle states.

A ``Unit`` is a frozen snapshot of one emergency vehicle. The registry keeps
the current snapshot per id; every change produces a new snapshot with
``evolve`` and replaces the old one, so values handed to callers never
change after the fact.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ambusim.geo import GeoPoint
from ambusim.vitals import VitalsSnapshot


class UnitStatus(str, Enum):
    """Lifecycle states of a fleet unit.

    States:
        AVAILABLE: Idle and free for dispatch.
        DISPATCHED: Driving to the pickup location with a patient assigned.
        ARRIVED_PICKUP: At the pickup location, loading the patient.
        TRANSPORTING: Carrying the patient to the destination.
        ARRIVED_DESTINATION: Patient handed over, unit not yet free.

    Normal flow:
        AVAILABLE → DISPATCHED → ARRIVED_PICKUP → TRANSPORTING
        → ARRIVED_DESTINATION → AVAILABLE
    """

    AVAILABLE = "available"
    DISPATCHED = "dispatched"
    ARRIVED_PICKUP = "arrived_pickup"
    TRANSPORTING = "transporting"
    ARRIVED_DESTINATION = "arrived_destination"

    @property
    def in_motion(self) -> bool:
        """True for the states the motion tick moves and walks."""
        return self in (UnitStatus.DISPATCHED, UnitStatus.TRANSPORTING)

    @property
    def carries_patient(self) -> bool:
        """True for the states in which a patient and vitals are attached."""
        return self in (
            UnitStatus.DISPATCHED,
            UnitStatus.ARRIVED_PICKUP,
            UnitStatus.TRANSPORTING,
        )


@dataclass(frozen=True)
class Unit:
    """Snapshot of one emergency vehicle.

    Attributes:
        id: Stable identifier assigned when the fleet is created.
        operator_name: Driver name shown to users and used for driver lookups.
        location: Current position.
        status: Current lifecycle state.
        eta_display: Wall-clock ETA of the current leg, e.g. ``"14:32:05"``.
        assigned_patient_id: Patient being served, if any.
        vitals: Latest vitals of the assigned patient, if any.
    """

    id: str
    operator_name: str
    location: GeoPoint
    status: UnitStatus = UnitStatus.AVAILABLE
    eta_display: str | None = None
    assigned_patient_id: str | None = None
    vitals: VitalsSnapshot | None = None

    def evolve(self, **changes: Any) -> Unit:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    @property
    def is_available(self) -> bool:
        return self.status is UnitStatus.AVAILABLE

    def consistent(self) -> bool:
        """Check that vitals, patient and status agree with each other."""
        has_patient = self.assigned_patient_id is not None
        has_vitals = self.vitals is not None
        return has_patient == has_vitals == self.status.carries_patient

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "operator_name": self.operator_name,
            "location": self.location.as_dict(),
            "status": self.status.value,
            "eta_display": self.eta_display,
            "assigned_patient_id": self.assigned_patient_id,
            "vitals": self.vitals.as_dict() if self.vitals else None,
        }


@dataclass(frozen=True)
class DispatchRequest:
    """A pickup request. Consumed by dispatch, never stored."""

    patient_id: str
    pickup: GeoPoint
