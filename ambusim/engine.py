"""Service-shaped facade over the fleet tracking engine.

``TrackingEngine`` owns one registry, one simulated clock and the
components working on them, and exposes the operations a presentation layer
needs: polling the fleet, dispatching, looking up units, writing vitals,
live monitoring and event subscription.

Time only moves when something advances the clock. Tests call ``advance``
to fast-forward; a live application calls ``start()`` to let a background
driver advance it with wall-clock time.

Example:
    >>> with TrackingEngine(EngineConfig(seed=1)) as engine:
    ...     unit = engine.dispatch("patient-7", GeoPoint.from_deg(40.713, -74.005))
    ...     engine.advance(Second(10))
    ...     engine.get_unit(unit.id).status
    <UnitStatus.ARRIVED_PICKUP: 'arrived_pickup'>
"""

from collections.abc import Iterable
from datetime import datetime
import threading
from typing import Any

import numpy as np
import structlog

from ambusim.config import EngineConfig
from ambusim.events import EventBus, EventHandler
from ambusim.fleet import DispatchRequest, Unit, UnitRegistry, default_fleet
from ambusim.geo import GeoPoint
from ambusim.scheduler import LifecycleScheduler, RealTimeDriver, TimerScheduler
from ambusim.service import DispatchService, QueryService
from ambusim.unit import ClockTime, Time
from ambusim.vitals import LiveMonitor, LiveReading, LiveVitalsWalk, VitalsGenerator, VitalsSnapshot

logger = structlog.get_logger(__name__)


class TrackingEngine:
    """Fleet tracking and vitals simulation engine.

    Attributes:
        config (EngineConfig): Timings, seeds and threading options.
        events (EventBus): Subscription point for observers.
        registry (UnitRegistry): Authoritative unit store.
        scheduler (TimerScheduler): Simulated clock and timer queue.
        lifecycle (LifecycleScheduler): Stage timers and motion tick.
        monitor (LiveMonitor): Live vitals streams.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        units: Iterable[Unit] | None = None,
        epoch: datetime | None = None,
    ):
        self.config = config or EngineConfig()
        self.events = EventBus()
        self.registry = UnitRegistry(default_fleet() if units is None else units, self.events)
        self.scheduler = TimerScheduler(self.config.max_workers, epoch)

        # Independent streams so that e.g. starting a live monitor does not
        # change the fleet walk of a seeded run.
        motion_seed, vitals_seed, live_seed = np.random.SeedSequence(self.config.seed).spawn(3)

        self.lifecycle = LifecycleScheduler(
            self.registry,
            self.scheduler,
            VitalsGenerator(vitals_seed),
            self.config,
            self.events,
            np.random.default_rng(motion_seed),
        )
        self.monitor = LiveMonitor(
            self.scheduler,
            LiveVitalsWalk(live_seed),
            self.config.live_interval,
            self.config.live_history_size,
            self.events,
        )
        self._dispatcher = DispatchService(self.registry, self.lifecycle, self.events)
        self._queries = QueryService(self.registry, self.config.allow_unassigned_vitals)

        self._driver: RealTimeDriver | None = None
        self._lock = threading.Lock()
        self._stopped = False

        logger.info("Engine created", units=len(self.registry), seed=self.config.seed)

    # ------------------------------------------------------------------
    # Fleet state
    # ------------------------------------------------------------------

    @property
    def now(self) -> ClockTime:
        return self.scheduler.now

    def list_units(self) -> list[Unit]:
        """Full fleet snapshot in registry order. This is the poll operation."""
        return self.registry.list()

    def get_unit(self, unit_id: str) -> Unit | None:
        return self.registry.get(unit_id)

    def subscribe(self, event_name: str, handler: EventHandler):
        """Call ``handler(event_name, data)`` on every ``event_name`` event.

        Returns:
            A function that removes the subscription.
        """
        return self.events.register_event_handler(event_name, handler)

    # ------------------------------------------------------------------
    # Dispatch and queries
    # ------------------------------------------------------------------

    def dispatch(self, patient_id: str, pickup: GeoPoint) -> Unit:
        """Dispatch the first available unit.

        Raises:
            NoCapacity: If no unit is available.
            RuntimeError: If the engine was stopped.
        """
        self._check_running()
        return self._dispatcher.dispatch(patient_id, pickup)

    def submit(self, request: DispatchRequest) -> Unit:
        self._check_running()
        return self._dispatcher.submit(request)

    def unit_for_patient(self, patient_id: str) -> Unit | None:
        return self._queries.unit_for_patient(patient_id)

    def unit_for_operator(self, operator_name: str) -> Unit | None:
        return self._queries.unit_for_operator(operator_name)

    def units_near(self, location: GeoPoint) -> list[Unit]:
        return self._queries.units_near(location)

    def update_vitals(self, unit_id: str, vitals: VitalsSnapshot) -> Unit | None:
        return self._queries.update_vitals(unit_id, vitals)

    def merge_vitals(self, unit_id: str, **changes: Any) -> Unit | None:
        return self._queries.merge_vitals(unit_id, **changes)

    # ------------------------------------------------------------------
    # Live monitoring
    # ------------------------------------------------------------------

    def start_monitoring(self, key: str) -> bool:
        """Start a live stream for a patient or unit id.

        The stream is seeded from the vitals of the unit serving ``key``
        (as patient id first, then as unit id) and from the baseline when
        neither has vitals.

        Raises:
            RuntimeError: If the engine was stopped.
        """
        self._check_running()
        unit = self.unit_for_patient(key) or self.get_unit(key)
        seed = unit.vitals if unit is not None else None
        return self.monitor.start(key, seed)

    def stop_monitoring(self, key: str) -> bool:
        return self.monitor.stop(key)

    def live_readings(self, key: str) -> list[LiveReading]:
        return self.monitor.history(key)

    # ------------------------------------------------------------------
    # Clock control and teardown
    # ------------------------------------------------------------------

    def advance(self, dt: Time) -> int:
        """Fast-forward the simulated clock, firing due timers."""
        return self.scheduler.advance(dt)

    def start(self, realtime: bool = True) -> None:
        """Start the motion tick and, with ``realtime``, the clock driver.

        Raises:
            RuntimeError: If the engine was stopped.
        """
        with self._lock:
            self._check_running()
            self.lifecycle.start_motion()
            if realtime and self._driver is None:
                self._driver = RealTimeDriver(
                    self.scheduler,
                    update_interval=self.config.update_interval,
                    time_scale=self.config.time_scale,
                )
                self._driver.start()

    def stop(self) -> None:
        """Stop the driver, all live streams and every timer. Idempotent."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            driver, self._driver = self._driver, None

        if driver is not None:
            driver.stop()
        self.monitor.stop_all()
        self.lifecycle.shutdown()
        self.scheduler.shutdown()
        logger.info("Engine stopped", now=str(self.scheduler.now))

    def _check_running(self) -> None:
        if self._stopped:
            msg = "Engine has been stopped"
            raise RuntimeError(msg)

    def __enter__(self) -> "TrackingEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
