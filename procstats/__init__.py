"""In-process named counters and timers with parent aggregation."""

from procstats.statistics import (
    Counter,
    InvalidTimerStateError,
    MetricsRegistry,
    ParentMismatchError,
    Timer,
    TimerState,
    get_metrics,
)

__all__ = [
    "Counter",
    "InvalidTimerStateError",
    "MetricsRegistry",
    "ParentMismatchError",
    "Timer",
    "TimerState",
    "get_metrics",
]
