"""Bounded random walks over patient vital signs.

Two independent walks live here:

* ``VitalsGenerator`` advances a full ``VitalsSnapshot`` on every fleet
  motion tick. Each walked metric moves by a uniform delta, is clamped to
  its band, then rounded. Glucose and consciousness are never walked.
* ``LiveVitalsWalk`` drives the faster per-patient monitoring stream over
  heart rate and oxygen saturation, with occasional heart-rate spikes.

Both draw from a seedable ``numpy.random.Generator`` guarded by a lock, so a
fixed seed reproduces the same sequence and concurrent callers never share
generator state mid-draw.

Example:
    >>> gen = VitalsGenerator(seed=7)
    >>> nxt = gen.next(BASELINE_VITALS)
    >>> 60 <= nxt.heart_rate <= 100
    True
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import threading

import numpy as np

from .snapshot import VitalsSnapshot


@dataclass(frozen=True)
class Drift:
    """Step rule for one metric.

    Attributes:
        delta: Half-width of the uniform step, the value moves by
            ``U(-delta, +delta)``.
        low: Lower clamp, or None for no lower bound.
        high: Upper clamp, or None for no upper bound.
        digits: Decimal places kept after rounding; 0 yields an ``int``.
    """

    delta: float
    low: float | None = None
    high: float | None = None
    digits: int = 0

    def clamp(self, value: float) -> float:
        if self.low is None and self.high is None:
            return value
        return float(np.clip(value, self.low, self.high))

    def settle(self, value: float) -> int | float:
        """Clamp then round ``value`` to this metric's precision."""
        value = round(self.clamp(value), self.digits)
        return int(value) if self.digits == 0 else value

    def step(self, value: float, rng: np.random.Generator) -> int | float:
        return self.settle(value + rng.uniform(-self.delta, self.delta))


FLEET_DRIFTS: dict[str, Drift] = {
    "heart_rate": Drift(3, 60, 100),
    "systolic": Drift(3, 100, 140),
    "diastolic": Drift(2, 60, 90),
    "oxygen_saturation": Drift(0.5, 94, 100, digits=1),
    "temperature": Drift(0.1, digits=1),
    "respiratory_rate": Drift(1, 12, 20),
}

LIVE_HEART_RATE = Drift(5, 40, 180)
LIVE_OXYGEN = Drift(1, 92, 100, digits=1)
LIVE_SPIKE_CHANCE = 0.1
LIVE_SPIKE = 15.0


class VitalsGenerator:
    """Random walk applied to in-transit patients on every motion tick.

    Attributes:
        drifts: Step rule per walked metric.
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None, drifts: dict[str, Drift] | None = None):
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()
        self.drifts = dict(drifts or FLEET_DRIFTS)

    def next(self, previous: VitalsSnapshot) -> VitalsSnapshot:
        """Return the snapshot following ``previous``.

        Every clamped metric of the result lies inside its band, whatever
        the input, because clamping happens after the step.
        """
        with self._lock:
            changes = {
                name: drift.step(getattr(previous, name), self._rng)
                for name, drift in self.drifts.items()
            }
        return replace(previous, **changes)


class LiveVitalsWalk:
    """Faster heart-rate and SpO2 walk for focused patient monitoring."""

    def __init__(
        self,
        seed: int | np.random.SeedSequence | None = None,
        heart_rate: Drift = LIVE_HEART_RATE,
        oxygen: Drift = LIVE_OXYGEN,
        spike_chance: float = LIVE_SPIKE_CHANCE,
        spike: float = LIVE_SPIKE,
    ):
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()
        self.heart_rate = heart_rate
        self.oxygen = oxygen
        self.spike_chance = spike_chance
        self.spike = spike

    def next(self, heart_rate: float, oxygen_saturation: float) -> tuple[int, float]:
        """Return the next ``(heart_rate, oxygen_saturation)`` pair."""
        with self._lock:
            hr = heart_rate + self._rng.uniform(-self.heart_rate.delta, self.heart_rate.delta)
            if self._rng.random() < self.spike_chance:
                hr += self.spike if self._rng.random() < 0.5 else -self.spike
            spo2 = oxygen_saturation + self._rng.uniform(-self.oxygen.delta, self.oxygen.delta)
        return self.heart_rate.settle(hr), self.oxygen.settle(spo2)
