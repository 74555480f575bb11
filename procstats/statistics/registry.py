"""Get-or-create registry of named metrics."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)


class Named(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def parents(self) -> tuple["Named", ...]: ...


T = TypeVar("T", bound=Named)


class ParentMismatchError(ValueError):
    """Raised in strict mode when a lookup redeclares different parents."""


def same_parents(existing: Sequence[object], requested: Sequence[object]) -> bool:
    """Identity comparison of two parent sequences, order included."""

    if len(existing) != len(requested):
        return False
    return all(left is right for left, right in zip(existing, requested))


class NamedRegistry(Generic[T]):
    """Append-only ``name -> metric`` map guarded by a single lock.

    The first caller for a name fixes the metric's parents. Later callers that
    pass a different, non-empty parent list get the existing metric back and a
    warning is logged (or :class:`ParentMismatchError` in strict mode).
    """

    def __init__(
        self,
        kind: str,
        factory: Callable[..., T],
        *,
        strict_parents: bool = False,
    ) -> None:
        self._kind = kind
        self._factory = factory
        self._strict_parents = strict_parents
        self._lock = threading.Lock()
        self._entries: dict[str, T] = {}

    def get_or_create(self, name: str, parents: Sequence[T] | None = None, **options: Any) -> T:
        """Return the metric called ``name``, creating it with ``parents`` and ``options`` if absent."""

        requested = tuple(parents or ())
        with self._lock:
            existing = self._entries.get(name)
            if existing is None:
                created = self._factory(name, requested, **options)
                self._entries[name] = created

        if existing is None:
            logger.debug("Created %s '%s'", self._kind, name, extra={"parents": len(requested)})
            return created

        if requested and not same_parents(existing.parents, requested):
            message = (
                f"{self._kind} '{name}' already exists with parents "
                f"{[parent.name for parent in existing.parents]}; "
                f"ignoring requested parents {[parent.name for parent in requested]}"
            )
            if self._strict_parents:
                raise ParentMismatchError(message)
            logger.warning(message)
        return existing

    def get(self, name: str) -> T | None:
        with self._lock:
            return self._entries.get(name)

    def get_all(self) -> tuple[T, ...]:
        """Return a point-in-time snapshot; later creations are not reflected."""

        with self._lock:
            return tuple(self._entries.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
