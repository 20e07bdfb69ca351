"""Read projections over the fleet and the manual vitals update path."""

from typing import Any

import structlog

from ambusim.errors import InvalidTransition
from ambusim.fleet import Unit, UnitRegistry
from ambusim.geo import GeoPoint
from ambusim.vitals import BASELINE_VITALS, VitalsSnapshot

logger = structlog.get_logger(__name__)


class QueryService:
    """Lookups for patients, drivers and available units.

    Vitals written by a crew member go through ``update_vitals`` or
    ``merge_vitals``. Both are guarded: a unit without an assigned patient
    rejects vitals with ``InvalidTransition`` so a snapshot never outlives
    its patient. ``allow_unassigned_vitals`` lifts the guard.
    """

    def __init__(self, registry: UnitRegistry, allow_unassigned_vitals: bool = False):
        self._registry = registry
        self.allow_unassigned_vitals = allow_unassigned_vitals

    def unit_for_patient(self, patient_id: str) -> Unit | None:
        """The unit serving ``patient_id``, or None."""
        for unit in self._registry.list():
            if unit.assigned_patient_id == patient_id:
                return unit
        return None

    def unit_for_operator(self, operator_name: str) -> Unit | None:
        """The unit driven by ``operator_name``, or None."""
        for unit in self._registry.list():
            if unit.operator_name == operator_name:
                return unit
        return None

    def units_near(self, location: GeoPoint) -> list[Unit]:
        """Available units for a pickup at ``location``.

        Every available unit is returned in registry order; ``location`` does
        not filter or rank them.
        """
        return [unit for unit in self._registry.list() if unit.is_available]

    def update_vitals(self, unit_id: str, vitals: VitalsSnapshot) -> Unit | None:
        """Overwrite the vitals of a unit's patient.

        Returns:
            Unit | None: The updated unit, or None for an unknown id.

        Raises:
            InvalidTransition: If the unit has no assigned patient and
                ``allow_unassigned_vitals`` is off.
            TypeError: If ``vitals`` is not a ``VitalsSnapshot``.
        """
        if not isinstance(vitals, VitalsSnapshot):
            msg = f"Expected a VitalsSnapshot, got {type(vitals).__name__}"
            raise TypeError(msg)
        return self._write_vitals(unit_id, lambda current: vitals)

    def merge_vitals(self, unit_id: str, **changes: Any) -> Unit | None:
        """Apply a partial vitals update onto the unit's current snapshot.

        Accepts field names or form keys (``heartRate``, ``bloodPressure``)
        with string or numeric values. A unit without vitals is merged onto
        the baseline.

        Raises:
            InvalidTransition: As for ``update_vitals``.
            ValueError: On unknown metrics or unparseable values.
        """
        return self._write_vitals(
            unit_id, lambda current: VitalsSnapshot.from_mapping(changes, current or BASELINE_VITALS)
        )

    def _write_vitals(self, unit_id: str, compute) -> Unit | None:
        def write(unit: Unit) -> Unit:
            if unit.assigned_patient_id is None and not self.allow_unassigned_vitals:
                msg = f"Unit {unit_id} has no assigned patient"
                raise InvalidTransition(msg, unit_id=unit_id)
            return unit.evolve(vitals=compute(unit.vitals))

        updated = self._registry.update(unit_id, write)
        if updated is not None:
            logger.info(
                "Vitals updated",
                unit_id=unit_id,
                patient_id=updated.assigned_patient_id,
                heart_rate=updated.vitals.heart_rate,
                blood_pressure=updated.vitals.blood_pressure,
            )
        return updated
