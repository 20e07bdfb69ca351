"""Dispatch of available units to pickup requests."""

import structlog

from ambusim.errors import NoCapacity
from ambusim.events import UNIT_DISPATCHED, EventBus
from ambusim.fleet import DispatchRequest, Unit, UnitRegistry
from ambusim.geo import GeoPoint
from ambusim.scheduler import LifecycleScheduler

logger = structlog.get_logger(__name__)


class DispatchService:
    """Selects an available unit, claims it and starts its lifecycle.

    Selection is the first ``available`` unit in registry order. The pickup
    location is recorded in the log but does not rank candidates.

    Dispatch is the only way out of ``available``. The claim runs as a
    registry update, so two concurrent dispatches can never take the same
    unit: the loser sees the unit as no longer available and moves on to
    the next candidate.
    """

    def __init__(
        self,
        registry: UnitRegistry,
        lifecycle: LifecycleScheduler,
        events: EventBus | None = None,
    ):
        self._registry = registry
        self._lifecycle = lifecycle
        self._events = events or EventBus()

    def dispatch(self, patient_id: str, pickup: GeoPoint) -> Unit:
        """Assign the first available unit to ``patient_id``.

        The unit becomes ``dispatched`` with baseline vitals and a pickup
        ETA, and its first stage timer is armed.

        Raises:
            NoCapacity: If no unit is available. Nothing is mutated and no
                timer is created.
        """
        for candidate in self._registry.list():
            if not candidate.is_available:
                continue
            claimed = self._registry.update(
                candidate.id, lambda unit: self._lifecycle.claim(unit, patient_id)
            )
            if claimed is None:
                continue

            self._lifecycle.begin(claimed.id)
            logger.info(
                "Unit dispatched",
                unit_id=claimed.id,
                patient_id=patient_id,
                pickup=str(pickup),
                eta=claimed.eta_display,
            )
            self._events.emit_event(UNIT_DISPATCHED, claimed)
            return claimed

        logger.warning("No unit available", patient_id=patient_id, pickup=str(pickup))
        raise NoCapacity(patient_id)

    def submit(self, request: DispatchRequest) -> Unit:
        """Dispatch for a ``DispatchRequest``."""
        return self.dispatch(request.patient_id, request.pickup)
