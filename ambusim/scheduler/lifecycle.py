"""Time-driven lifecycle of dispatched units.

The ``LifecycleScheduler`` owns the lifecycle graph and two kinds of timers
on the shared ``TimerScheduler``:

* one stage timer per active unit, created when the unit enters a timed
  state and firing the single transition leaving that state;
* one periodic motion tick for the whole fleet, moving every unit that is
  ``dispatched`` or ``transporting`` and walking its patient's vitals.

Lifecycle graph::

    available ──dispatch──▶ dispatched ──D1──▶ arrived_pickup ──D2──▶ transporting
        ▲                                                                  │
        └────────────D4──────── arrived_destination ◀────────D3────────────┘

Stage transitions are applied through ``UnitRegistry.update`` so they are
atomic with respect to the motion tick and to dispatch. A stage timer that
finds its unit in a state other than the one it was scheduled from drops
its transition and ends the unit's chain.
"""

import threading

import numpy as np
import structlog

from ambusim.config import EngineConfig
from ambusim.errors import InvalidTransition
from ambusim.events import STAGE_CHANGED, TRANSITION_DROPPED, EventBus
from ambusim.fleet import Unit, UnitRegistry, UnitStatus
from ambusim.state import Action, StateGraph, StateMachine
from ambusim.timer import Timer
from ambusim.unit import ClockTime, Time
from ambusim.vitals import BASELINE_VITALS, VitalsGenerator

from .scheduler import TimerScheduler

logger = structlog.get_logger(__name__)


class LifecycleScheduler:
    """Drives units from dispatch back to ``available``.

    Attributes:
        machine (StateMachine[UnitStatus]): Validated lifecycle graph.
        _stage_timers (dict[str, Timer]): Latest stage timer per unit id.
        _motion_timer (Timer | None): Fleet motion tick while running.
    """

    def __init__(
        self,
        registry: UnitRegistry,
        scheduler: TimerScheduler,
        generator: VitalsGenerator | None = None,
        config: EngineConfig | None = None,
        events: EventBus | None = None,
        rng: np.random.Generator | None = None,
    ):
        self._registry = registry
        self._scheduler = scheduler
        self._config = config or EngineConfig()
        motion_seed, vitals_seed = np.random.SeedSequence(self._config.seed).spawn(2)
        self._generator = generator or VitalsGenerator(vitals_seed)
        self._events = events or EventBus()
        self._rng = rng or np.random.default_rng(motion_seed)
        self._rng_lock = threading.Lock()

        self._stage_timers: dict[str, Timer] = {}
        self._motion_timer: Timer | None = None
        self._lock = threading.Lock()

        self.machine: StateMachine[UnitStatus] = StateMachine(self._build_graph())

    def _build_graph(self) -> StateGraph:
        config = self._config
        return {
            UnitStatus.AVAILABLE: (Action(UnitStatus.DISPATCHED, self._assign),),
            UnitStatus.DISPATCHED: (
                Action(UnitStatus.ARRIVED_PICKUP, self._arrive_pickup, config.pickup_delay),
            ),
            UnitStatus.ARRIVED_PICKUP: (
                Action(UnitStatus.TRANSPORTING, self._load_patient, config.loading_delay),
            ),
            UnitStatus.TRANSPORTING: (
                Action(UnitStatus.ARRIVED_DESTINATION, self._hand_over, config.transport_delay),
            ),
            UnitStatus.ARRIVED_DESTINATION: (
                Action(UnitStatus.AVAILABLE, self._release, config.handover_delay),
            ),
        }

    # ------------------------------------------------------------------
    # Transition effects
    # ------------------------------------------------------------------

    def eta(self, leg: Time) -> str:
        """Wall-clock time ``leg`` from now, formatted for display."""
        return self._scheduler.wall_time(leg).strftime(self._config.eta_format)

    def _assign(self, unit: Unit, patient_id: str) -> Unit:
        return unit.evolve(
            status=UnitStatus.DISPATCHED,
            assigned_patient_id=patient_id,
            vitals=BASELINE_VITALS,
            eta_display=self.eta(self._config.pickup_eta),
        )

    def _arrive_pickup(self, unit: Unit) -> Unit:
        return unit.evolve(status=UnitStatus.ARRIVED_PICKUP)

    def _load_patient(self, unit: Unit) -> Unit:
        return unit.evolve(
            status=UnitStatus.TRANSPORTING,
            eta_display=self.eta(self._config.hospital_eta),
        )

    def _hand_over(self, unit: Unit) -> Unit:
        return unit.evolve(
            status=UnitStatus.ARRIVED_DESTINATION,
            assigned_patient_id=None,
            vitals=None,
        )

    def _release(self, unit: Unit) -> Unit:
        return unit.evolve(status=UnitStatus.AVAILABLE, eta_display=None)

    # ------------------------------------------------------------------
    # Stage timers
    # ------------------------------------------------------------------

    def claim(self, unit: Unit, patient_id: str) -> Unit | None:
        """Registry update that assigns ``patient_id`` to an available unit.

        Returns None, so nothing is written, when the unit is no longer
        available by the time the update runs under its lock.
        """
        if not unit.is_available:
            return None
        return self.machine.request_transition(unit.status, UnitStatus.DISPATCHED, unit, patient_id)

    def begin(self, unit_id: str) -> Timer | None:
        """Schedule the stage timer for the unit's current state.

        Called by dispatch right after a successful claim. Any stage timer
        still pending for the unit is cancelled first.
        """
        unit = self._registry.get(unit_id)
        if unit is None:
            return None
        return self._schedule_next(unit)

    def pending_stage(self, unit_id: str) -> Timer | None:
        """The unit's pending stage timer, if it has one."""
        with self._lock:
            timer = self._stage_timers.get(unit_id)
        if timer is None or not timer.pending:
            return None
        return timer

    def _schedule_next(self, unit: Unit) -> Timer | None:
        action = self.machine.timed_action(unit.status)
        with self._lock:
            previous = self._stage_timers.pop(unit.id, None)
            if previous is not None and previous.pending:
                previous.cancel()
            if action is None:
                return None

            expected, target = unit.status, action.state
            timer = self._scheduler.call_later(
                action.delay,
                lambda now: self._advance_stage(unit.id, expected, target, now),
                name=f"{unit.id}:{target.value}",
            )
            self._stage_timers[unit.id] = timer

        logger.debug(
            "Stage timer armed",
            unit_id=unit.id,
            status=expected.value,
            next_status=target.value,
            delay=str(action.delay),
        )
        return timer

    def _advance_stage(
        self, unit_id: str, expected: UnitStatus, target: UnitStatus, now: ClockTime
    ) -> None:
        def transition(unit: Unit) -> Unit:
            if unit.status is not expected:
                msg = f"Unit {unit_id} is {unit.status.value}, expected {expected.value}"
                raise InvalidTransition(msg, unit_id=unit_id)
            return self.machine.request_transition(expected, target, unit)

        try:
            updated = self._registry.update(unit_id, transition)
        except InvalidTransition as exc:
            logger.warning(
                "Stage transition dropped",
                unit_id=unit_id,
                next_status=target.value,
                reason=str(exc),
                now=str(now),
            )
            self._events.emit_event(
                TRANSITION_DROPPED,
                {"unit_id": unit_id, "expected": expected, "target": target},
            )
            return

        if updated is None:
            return

        logger.info(
            "Stage changed",
            unit_id=unit_id,
            status=updated.status.value,
            patient_id=updated.assigned_patient_id,
            now=str(now),
        )
        self._events.emit_event(STAGE_CHANGED, updated)
        self._schedule_next(updated)

    # ------------------------------------------------------------------
    # Motion tick
    # ------------------------------------------------------------------

    @property
    def motion_running(self) -> bool:
        timer = self._motion_timer
        return timer is not None and timer.pending

    def start_motion(self) -> bool:
        """Start the fleet motion tick. Returns False if already running."""
        with self._lock:
            if self._motion_timer is not None and self._motion_timer.pending:
                return False
            self._motion_timer = self._scheduler.call_every(
                self._config.motion_interval, self._motion_tick, name="motion"
            )
        logger.info("Motion tick started", interval=str(self._config.motion_interval))
        return True

    def stop_motion(self) -> bool:
        """Stop the fleet motion tick. Stage timers keep running."""
        with self._lock:
            timer, self._motion_timer = self._motion_timer, None
        if timer is None or not timer.pending:
            return False
        timer.cancel()
        logger.info("Motion tick stopped", ticks=timer.fired)
        return True

    def _motion_tick(self, now: ClockTime) -> None:
        moved = 0
        for unit_id in self._registry.ids():
            if self._registry.update(unit_id, self._move) is not None:
                moved += 1
        logger.debug("Motion tick", now=str(now), moved=moved)

    def _move(self, unit: Unit) -> Unit | None:
        if not unit.status.in_motion:
            return None

        limit = self._config.max_position_offset
        with self._rng_lock:
            d_lat, d_lon = self._rng.uniform(-limit, limit, size=2)
        vitals = self._generator.next(unit.vitals) if unit.vitals is not None else None
        return unit.evolve(location=unit.location.offset(float(d_lat), float(d_lon)), vitals=vitals)

    def shutdown(self) -> None:
        """Stop the motion tick and cancel every stage timer."""
        self.stop_motion()
        with self._lock:
            timers = list(self._stage_timers.values())
            self._stage_timers.clear()
        for timer in timers:
            timer.cancel()
        logger.debug("Lifecycle scheduler shut down", stage_timers=len(timers))
