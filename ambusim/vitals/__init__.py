"""Patient vital signs: snapshots, random walks and live monitoring.

Components:
    VitalsSnapshot: Complete, immutable set of readings
    VitalsGenerator: Bounded walk applied on every fleet motion tick
    LiveVitalsWalk: Faster heart-rate/SpO2 walk for live monitoring
    LiveMonitor: Opt-in per-patient monitoring streams

Charts live in ``ambusim.vitals.chart`` and are imported on demand.
"""

from .generator import FLEET_DRIFTS, Drift, LiveVitalsWalk, VitalsGenerator
from .monitor import LiveMonitor, LiveReading
from .snapshot import (
    BASELINE_VITALS,
    FORM_ALIASES,
    METRICS,
    MetricSpec,
    VitalsSnapshot,
    parse_blood_pressure,
)

__all__ = [
    "VitalsSnapshot",
    "BASELINE_VITALS",
    "MetricSpec",
    "METRICS",
    "FORM_ALIASES",
    "parse_blood_pressure",
    "Drift",
    "FLEET_DRIFTS",
    "VitalsGenerator",
    "LiveVitalsWalk",
    "LiveMonitor",
    "LiveReading",
]
