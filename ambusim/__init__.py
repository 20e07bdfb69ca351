"""Ambulance fleet tracking and patient vitals simulation engine.

ambusim simulates a small fleet of emergency units. Each unit moves through
a fixed, time-driven lifecycle once dispatched, and while it carries a
patient the engine produces a slowly drifting stream of vital signs.

Framework Components:
    Engine (ambusim.engine):
        • TrackingEngine: service-shaped facade, start/stop and fast-forward
    Fleet (ambusim.fleet):
        • Unit, UnitStatus: frozen unit snapshots and lifecycle states
        • UnitRegistry: authoritative store with per-unit locks
    Scheduling (ambusim.scheduler):
        • TimerScheduler: timer queue over a simulated clock
        • LifecycleScheduler: stage timers and the fleet motion tick
        • RealTimeDriver: advances the clock with wall-clock time
    Services (ambusim.service):
        • DispatchService: first-available dispatch
        • QueryService: lookups and the manual vitals update path
    Vitals (ambusim.vitals):
        • VitalsSnapshot, VitalsGenerator, LiveMonitor
    Utilities:
        • ambusim.unit: type-safe time and angle measurements
        • ambusim.geo: immutable latitude/longitude points
        • ambusim.state: validated transition graphs
        • ambusim.log: structlog configuration

Quick Start:
    >>> from ambusim import EngineConfig, GeoPoint, Second, TrackingEngine
    >>> with TrackingEngine(EngineConfig(seed=3)) as engine:
    ...     unit = engine.dispatch("patient-1", GeoPoint.from_deg(40.713, -74.005))
    ...     engine.advance(Second(45))
    ...     engine.get_unit(unit.id).status.value
    'available'
"""

from .config import EngineConfig
from .engine import TrackingEngine
from .errors import InvalidTransition, NoCapacity, TrackingError
from .fleet import DispatchRequest, Unit, UnitRegistry, UnitStatus
from .geo import GeoPoint
from .unit import ClockTime, Minute, Second
from .vitals import VitalsSnapshot

__version__ = "0.1.0"

__all__ = [
    "TrackingEngine",
    "EngineConfig",
    "TrackingError",
    "NoCapacity",
    "InvalidTransition",
    "Unit",
    "UnitStatus",
    "UnitRegistry",
    "DispatchRequest",
    "GeoPoint",
    "VitalsSnapshot",
    "Second",
    "Minute",
    "ClockTime",
    "__version__",
]
