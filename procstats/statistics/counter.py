"""Thread-safe counters with optional parent aggregation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping

from procstats.lib.management import ManagementServer
from procstats.lib.registration import ManagementRegistration
from procstats.statistics.schemas import CounterSnapshot

logger = logging.getLogger(__name__)


class Counter:
    """A named integer that only ever changes through :meth:`increment`.

    Counters are obtained from :meth:`MetricsRegistry.get_counter`, which
    creates a counter on first use and returns the same instance afterwards.
    Each increment is applied to this counter first and then, one by one, to
    every parent counter. No lock spans the child and its parents, so a reader
    may briefly see the child updated before a parent.
    """

    __slots__ = ("_name", "_parents", "_count", "_lock", "registration")

    def __init__(
        self,
        name: str,
        parents: tuple["Counter", ...] = (),
        *,
        management: ManagementServer | None = None,
        domain: str | None = None,
        type_name: str = "Counter",
    ) -> None:
        self._name = name
        self._parents = tuple(parents)
        self._count = 0
        self._lock = threading.Lock()
        self.registration = ManagementRegistration(management, domain, type_name, name, self, logger)
        self.registration.register()

    @property
    def name(self) -> str:
        return self._name

    @property
    def parents(self) -> tuple["Counter", ...]:
        return self._parents

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def increment(self, delta: int = 1) -> None:
        """Add ``delta`` to this counter and then to each parent, in order."""

        with self._lock:
            self._count += delta
        for parent in self._parents:
            parent.increment(delta)

    def snapshot(self) -> CounterSnapshot:
        return CounterSnapshot(name=self._name, count=self.count)

    def management_attributes(self) -> Mapping[str, float]:
        return {"count": self.count}

    def __repr__(self) -> str:
        return f"Counter(name={self._name!r}, count={self.count})"
