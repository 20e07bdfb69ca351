"""Opt-in live monitoring streams, one per patient or unit key.

A stream is a periodic timer on the engine's scheduler that advances a
``LiveVitalsWalk`` and keeps the most recent readings for charting. Streams
are independent of the fleet motion tick and of each other: starting or
stopping one never touches another.
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime
import threading
from typing import TYPE_CHECKING

import pandas as pd
import structlog

from ambusim.events import LIVE_READING, EventBus
from ambusim.timer import Timer
from ambusim.unit import ClockTime, Second, Time

from .generator import LiveVitalsWalk
from .snapshot import BASELINE_VITALS, VitalsSnapshot

if TYPE_CHECKING:
    from ambusim.scheduler import TimerScheduler

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL = Second(3)
DEFAULT_HISTORY_SIZE = 20


@dataclass(frozen=True)
class LiveReading:
    """One sample of a live-monitoring stream.

    Attributes:
        key: Patient or unit id the stream belongs to.
        elapsed: Simulated seconds since the scheduler started.
        timestamp: Wall-clock time of the sample.
        heart_rate: Beats per minute.
        oxygen_saturation: SpO2 percentage.
    """

    key: str
    elapsed: float
    timestamp: datetime
    heart_rate: int
    oxygen_saturation: float


class _Stream:
    def __init__(self, key: str, timer: Timer, history_size: int, seed: VitalsSnapshot):
        self.key = key
        self.timer = timer
        self.readings: deque[LiveReading] = deque(maxlen=history_size)
        self.heart_rate: float = seed.heart_rate
        self.oxygen_saturation: float = seed.oxygen_saturation


class LiveMonitor:
    """Registry of live-monitoring streams keyed by patient or unit id."""

    def __init__(
        self,
        scheduler: TimerScheduler,
        walk: LiveVitalsWalk | None = None,
        interval: Time = DEFAULT_INTERVAL,
        history_size: int = DEFAULT_HISTORY_SIZE,
        events: EventBus | None = None,
    ):
        self._scheduler = scheduler
        self._walk = walk or LiveVitalsWalk()
        self._interval = interval
        self._history_size = history_size
        self._events = events or EventBus()
        self._streams: dict[str, _Stream] = {}
        self._lock = threading.Lock()

    def start(self, key: str, seed: VitalsSnapshot | None = None) -> bool:
        """Start a stream for ``key`` seeded from ``seed``'s heart rate and SpO2.

        Returns:
            bool: False if a stream for ``key`` was already running.
        """
        with self._lock:
            if key in self._streams:
                return False
            timer = self._scheduler.call_every(
                self._interval,
                lambda now, key=key: self._tick(key, now),
                name=f"live:{key}",
            )
            self._streams[key] = _Stream(key, timer, self._history_size, seed or BASELINE_VITALS)
        logger.info("Live monitoring started", key=key, interval=str(self._interval))
        return True

    def stop(self, key: str) -> bool:
        """Stop the stream for ``key``. Stopping an unknown key is a no-op.

        Returns:
            bool: True if a running stream was stopped.
        """
        with self._lock:
            stream = self._streams.pop(key, None)
        if stream is None:
            return False
        stream.timer.cancel()
        logger.info("Live monitoring stopped", key=key, samples=stream.timer.fired)
        return True

    def stop_all(self) -> None:
        for key in self.keys():
            self.stop(key)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._streams)

    def is_running(self, key: str) -> bool:
        with self._lock:
            return key in self._streams

    def history(self, key: str) -> list[LiveReading]:
        """Readings kept for ``key``, oldest first. Empty for unknown keys."""
        with self._lock:
            stream = self._streams.get(key)
            return list(stream.readings) if stream else []

    def latest(self, key: str) -> LiveReading | None:
        readings = self.history(key)
        return readings[-1] if readings else None

    def to_frame(self, key: str) -> pd.DataFrame:
        """Readings for ``key`` as a DataFrame indexed by timestamp."""
        readings = self.history(key)
        columns = ["timestamp", "elapsed", "heart_rate", "oxygen_saturation"]
        if not readings:
            return pd.DataFrame(columns=columns).set_index("timestamp")
        frame = pd.DataFrame([asdict(r) for r in readings])
        return frame[columns].set_index("timestamp").sort_index()

    def _tick(self, key: str, now: ClockTime) -> None:
        with self._lock:
            stream = self._streams.get(key)
            if stream is None:
                return
            hr, spo2 = self._walk.next(stream.heart_rate, stream.oxygen_saturation)
            stream.heart_rate, stream.oxygen_saturation = hr, spo2
            reading = LiveReading(
                key=key,
                elapsed=float(now),
                timestamp=self._scheduler.wall_time(),
                heart_rate=hr,
                oxygen_saturation=spo2,
            )
            stream.readings.append(reading)
        logger.debug("Live reading", key=key, heart_rate=hr, oxygen_saturation=spo2)
        self._events.emit_event(LIVE_READING, reading)
