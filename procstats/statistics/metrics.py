"""Registry of counters and timers owned by the host application."""

from __future__ import annotations

import time
from functools import lru_cache

from procstats.config import Settings, get_settings
from procstats.lib.management import ManagementServer
from procstats.statistics.counter import Counter
from procstats.statistics.registry import NamedRegistry
from procstats.statistics.schemas import CounterSnapshot, TimerSnapshot
from procstats.statistics.timer import Clock, Timer


class MetricsRegistry:
    """Get-or-create access to named counters and timers.

    This is the only way counters and timers are constructed. New metrics are
    registered on ``management`` (when given) as
    ``<domain>:type=<type_name>,name=<name>``.
    """

    def __init__(
        self,
        management: ManagementServer | None = None,
        *,
        domain: str = "procstats",
        strict_parents: bool = False,
        clock: Clock = time.time,
        monotonic: Clock = time.monotonic,
    ) -> None:
        self._management = management
        self._domain = domain
        self._clock = clock
        self._monotonic = monotonic
        self._counters: NamedRegistry[Counter] = NamedRegistry(
            "Counter", self._new_counter, strict_parents=strict_parents
        )
        self._timers: NamedRegistry[Timer] = NamedRegistry("Timer", self._new_timer, strict_parents=strict_parents)

    @classmethod
    def from_settings(cls, settings: Settings) -> "MetricsRegistry":
        management = ManagementServer() if settings.management_enabled else None
        return cls(management, domain=settings.domain, strict_parents=settings.strict_parents)

    @property
    def management(self) -> ManagementServer | None:
        return self._management

    def _new_counter(
        self,
        name: str,
        parents: tuple[Counter, ...],
        *,
        domain: str | None = None,
        type_name: str = "Counter",
    ) -> Counter:
        return Counter(
            name,
            parents,
            management=self._management,
            domain=domain or self._domain,
            type_name=type_name,
        )

    def _new_timer(
        self,
        name: str,
        parents: tuple[Timer, ...],
        *,
        domain: str | None = None,
        type_name: str = "Timer",
    ) -> Timer:
        return Timer(
            name,
            parents,
            management=self._management,
            domain=domain or self._domain,
            type_name=type_name,
            clock=self._clock,
            monotonic=self._monotonic,
        )

    def get_counter(
        self,
        name: str,
        *parents: Counter,
        domain: str | None = None,
        type_name: str = "Counter",
    ) -> Counter:
        """Return the counter called ``name``, creating it on first use.

        ``parents``, ``domain`` and ``type_name`` only apply when the counter is
        created; an existing counter keeps the parents it was created with.
        """

        return self._counters.get_or_create(name, parents, domain=domain, type_name=type_name)

    def get_timer(
        self,
        name: str,
        *parents: Timer,
        domain: str | None = None,
        type_name: str = "Timer",
    ) -> Timer:
        """Return the timer called ``name``, creating it on first use."""

        return self._timers.get_or_create(name, parents, domain=domain, type_name=type_name)

    def counters(self) -> tuple[Counter, ...]:
        return self._counters.get_all()

    def timers(self) -> tuple[Timer, ...]:
        return self._timers.get_all()

    def list_counters(self) -> list[CounterSnapshot]:
        return [counter.snapshot() for counter in self._counters.get_all()]

    def list_timers(self) -> list[TimerSnapshot]:
        return [timer.snapshot() for timer in self._timers.get_all()]


@lru_cache
def get_metrics() -> MetricsRegistry:
    """Return the process-wide registry built from settings."""

    return MetricsRegistry.from_settings(get_settings())
