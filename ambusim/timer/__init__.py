"""Timer handles managed by the scheduler."""

from .timer import Timer, TimerCallback

__all__ = ["Timer", "TimerCallback"]
