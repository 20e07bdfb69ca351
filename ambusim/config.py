"""Engine configuration.

Module-level constants hold the default timings of the unit lifecycle and
the random walks. ``EngineConfig`` bundles them so an engine can be built
with different values, for example shorter delays in a demo or a fixed seed
in tests.

Lifecycle timings:
    PICKUP_DELAY: dispatched → arrived_pickup (D1)
    LOADING_DELAY: arrived_pickup → transporting (D2)
    TRANSPORT_DELAY: transporting → arrived_destination (D3)
    HANDOVER_DELAY: arrived_destination → available (D4)

Example:
    >>> config = EngineConfig(seed=42)
    >>> fast = config.replace(pickup_delay=Second(2))
    >>> float(fast.pickup_delay)
    2.0
"""

from dataclasses import dataclass, replace

from ambusim.unit import Minute, Second, Time

PICKUP_DELAY = Second(10)
LOADING_DELAY = Second(10)
TRANSPORT_DELAY = Second(15)
HANDOVER_DELAY = Second(10)

# Displayed ETA legs. They are what a crew is told, not the simulated delays.
PICKUP_ETA = Minute(10)
HOSPITAL_ETA = Minute(15)

MOTION_INTERVAL = Second(3)
MAX_POSITION_OFFSET = 0.0005  # degrees per axis per tick

LIVE_INTERVAL = Second(3)
LIVE_HISTORY_SIZE = 20

ETA_FORMAT = "%H:%M:%S"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for a tracking engine."""

    pickup_delay: Time = PICKUP_DELAY
    loading_delay: Time = LOADING_DELAY
    transport_delay: Time = TRANSPORT_DELAY
    handover_delay: Time = HANDOVER_DELAY

    pickup_eta: Time = PICKUP_ETA
    hospital_eta: Time = HOSPITAL_ETA
    eta_format: str = ETA_FORMAT

    motion_interval: Time = MOTION_INTERVAL
    max_position_offset: float = MAX_POSITION_OFFSET

    live_interval: Time = LIVE_INTERVAL
    live_history_size: int = LIVE_HISTORY_SIZE

    allow_unassigned_vitals: bool = False

    max_workers: int = 1
    update_interval: float = 0.1  # seconds
    time_scale: float = 1.0

    seed: int | None = None

    def __post_init__(self):
        if self.max_position_offset < 0:
            msg = "max_position_offset must not be negative"
            raise ValueError(msg)
        if self.live_history_size < 1:
            msg = "live_history_size must be at least 1"
            raise ValueError(msg)

    def replace(self, **changes) -> "EngineConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)
