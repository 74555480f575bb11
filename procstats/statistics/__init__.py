"""Named counters and timers with parent aggregation."""

from procstats.statistics.counter import Counter
from procstats.statistics.metrics import MetricsRegistry, get_metrics
from procstats.statistics.registry import NamedRegistry, ParentMismatchError
from procstats.statistics.timer import InvalidTimerStateError, Timer, TimerState

__all__ = [
    "Counter",
    "InvalidTimerStateError",
    "MetricsRegistry",
    "NamedRegistry",
    "ParentMismatchError",
    "Timer",
    "TimerState",
    "get_metrics",
]
