"""Call timers aggregating count and total elapsed milliseconds."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from types import TracebackType

from procstats.lib.management import ManagementServer
from procstats.lib.method_trace import caller_frame_descriptor
from procstats.lib.registration import ManagementRegistration
from procstats.statistics.schemas import TimerSnapshot

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class InvalidTimerStateError(RuntimeError):
    """Raised when a timer state is stopped twice or read before it is stopped."""


class TimerState:
    """One in-flight measurement produced by :meth:`Timer.start`.

    A state is active until :meth:`stop` is called exactly once. The active
    flag is guarded by the owning timer's lock.
    """

    __slots__ = ("_timer", "_start_time", "_start_mark", "_active", "_elapsed_time")

    def __init__(self, timer: "Timer", start_time: float, start_mark: float) -> None:
        self._timer = timer
        self._start_time = start_time
        self._start_mark = start_mark
        self._active = True
        self._elapsed_time = 0

    @property
    def timer(self) -> "Timer":
        return self._timer

    @property
    def start_time(self) -> float:
        """Wall-clock start, in seconds since the epoch."""

        return self._start_time

    @property
    def active(self) -> bool:
        with self._timer._lock:
            return self._active

    @property
    def elapsed_time(self) -> int:
        """Elapsed milliseconds; only available once stopped."""

        with self._timer._lock:
            if self._active:
                raise InvalidTimerStateError("Timer state is not yet stopped")
            return self._elapsed_time

    def stop(self) -> int:
        """Stop the measurement and fold it into the timer and its parents.

        Returns the elapsed milliseconds.
        """

        elapsed = self._finish()
        if elapsed is None:
            raise InvalidTimerStateError("Timer state is already stopped")
        return elapsed

    def stop_and_debug_log(self, log: logging.Logger, *message: str) -> int:
        """Stop, then log ``<caller> - <message> - Executed in <n>ms`` at debug level.

        Nothing is formatted when ``log`` has debug disabled.
        """

        elapsed = self.stop()
        if log.isEnabledFor(logging.DEBUG):
            log.debug("%s - %s - Executed in %dms", caller_frame_descriptor(1), "".join(message), elapsed)
        return elapsed

    def _finish(self) -> int | None:
        timer = self._timer
        with timer._lock:
            if not self._active:
                return None
            self._active = False
            elapsed = max(0, int((timer._monotonic() - self._start_mark) * 1000))
            self._elapsed_time = elapsed
            timer._total_time += elapsed
            timer._total_calls += 1
        timer._propagate(elapsed)
        return elapsed

    def __enter__(self) -> "TimerState":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # an explicit stop() inside the block is allowed
        self._finish()


class Timer:
    """Aggregates completed measurements: call count, total and average time.

    ``total_calls`` and ``total_time`` change together under the timer's lock.
    Stop events are replayed on every parent timer after that lock is released,
    so parents may briefly lag behind their children.
    """

    __slots__ = (
        "_name",
        "_parents",
        "_lock",
        "_total_time",
        "_total_calls",
        "_clock",
        "_monotonic",
        "registration",
    )

    def __init__(
        self,
        name: str,
        parents: tuple["Timer", ...] = (),
        *,
        management: ManagementServer | None = None,
        domain: str | None = None,
        type_name: str = "Timer",
        clock: Clock = time.time,
        monotonic: Clock = time.monotonic,
    ) -> None:
        self._name = name
        self._parents = tuple(parents)
        self._lock = threading.RLock()
        self._total_time = 0
        self._total_calls = 0
        self._clock = clock
        self._monotonic = monotonic
        self.registration = ManagementRegistration(management, domain, type_name, name, self, logger)
        self.registration.register()

    @property
    def name(self) -> str:
        return self._name

    @property
    def parents(self) -> tuple["Timer", ...]:
        return self._parents

    @property
    def total_calls(self) -> int:
        with self._lock:
            return self._total_calls

    @property
    def total_time(self) -> int:
        with self._lock:
            return self._total_time

    @property
    def average_time(self) -> float:
        with self._lock:
            if self._total_calls == 0:
                return 0.0
            return self._total_time / self._total_calls

    def start(self) -> TimerState:
        return TimerState(self, self._clock(), self._monotonic())

    def _record(self, elapsed: int) -> None:
        with self._lock:
            self._total_time += elapsed
            self._total_calls += 1
        self._propagate(elapsed)

    def _propagate(self, elapsed: int) -> None:
        for parent in self._parents:
            parent._record(elapsed)

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            calls = self._total_calls
            total = self._total_time
        average = total / calls if calls else 0.0
        return TimerSnapshot(name=self._name, total_calls=calls, total_time=total, average_time=average)

    def management_attributes(self) -> Mapping[str, float]:
        snapshot = self.snapshot()
        return {
            "total_calls": snapshot.total_calls,
            "total_time": snapshot.total_time,
            "average_time": snapshot.average_time,
        }

    def __repr__(self) -> str:
        return f"Timer(name={self._name!r}, total_calls={self.total_calls})"
