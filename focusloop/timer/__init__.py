"""Timer package."""

from .engine import (
    TimerEngine,
    TimerSettings,
    TimerState,
    Mode,
    DEFAULT_DURATIONS,
    LONG_BREAK_INTERVAL,
)

__all__ = [
    "TimerEngine",
    "TimerSettings",
    "TimerState",
    "Mode",
    "DEFAULT_DURATIONS",
    "LONG_BREAK_INTERVAL",
]
