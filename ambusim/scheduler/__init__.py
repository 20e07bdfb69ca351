"""Simulated clock, real-time driver and unit lifecycle scheduling.

Components:
    TimerScheduler: Delayed-task queue over a fast-forwardable clock
    RealTimeDriver: Background thread advancing the clock with wall time
    LifecycleScheduler: Stage timers and the fleet motion tick
"""

from .lifecycle import LifecycleScheduler
from .realtime import RealTimeDriver
from .scheduler import TimerScheduler

__all__ = ["TimerScheduler", "RealTimeDriver", "LifecycleScheduler"]
