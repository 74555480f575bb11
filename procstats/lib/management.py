"""In-process management server exposing registered resources for external inspection.

Resources are registered under structured object names of the form
``domain:key=value[,key=value...]`` and read back through
``management_attributes()``. The server doubles as a Prometheus collector so
any scraper can inspect the registered resources out of process.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterator, Mapping
from typing import Protocol, runtime_checkable

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, Metric

_FORBIDDEN_DOMAIN_CHARS = frozenset(":*?\n")
_FORBIDDEN_PROPERTY_CHARS = frozenset(':,=*?"\n')
_METRIC_NAME_INVALID = re.compile(r"[^a-zA-Z0-9_]")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

LABELS = ("domain", "type", "name")


class ManagementError(Exception):
    """Base class for management server failures."""


class MalformedObjectNameError(ManagementError, ValueError):
    """Raised when an object name string cannot be parsed."""


class InstanceAlreadyExistsError(ManagementError):
    """Raised when registering a name that is already taken."""


class InstanceNotFoundError(ManagementError, LookupError):
    """Raised when unregistering or looking up an unknown name."""


@runtime_checkable
class ManagedResource(Protocol):
    """Anything that can publish numeric attributes to the management server."""

    def management_attributes(self) -> Mapping[str, float]: ...


class ObjectName:
    """Parsed ``domain:key=value,...`` identifier.

    Equality and hashing use the canonical form (properties sorted by key) while
    ``str()`` preserves the order the properties were given in.
    """

    __slots__ = ("domain", "properties")

    def __init__(self, domain: str, properties: tuple[tuple[str, str], ...]) -> None:
        self.domain = domain
        self.properties = properties

    @classmethod
    def parse(cls, text: str) -> "ObjectName":
        if not isinstance(text, str):
            raise MalformedObjectNameError(f"Object name must be a string, got {type(text).__name__}")
        domain, separator, rest = text.partition(":")
        if not separator:
            raise MalformedObjectNameError(f"Object name '{text}' has no domain separator")
        if _FORBIDDEN_DOMAIN_CHARS.intersection(domain):
            raise MalformedObjectNameError(f"Invalid character in domain of '{text}'")
        if not rest:
            raise MalformedObjectNameError(f"Object name '{text}' has no key properties")

        properties: list[tuple[str, str]] = []
        seen: set[str] = set()
        for item in rest.split(","):
            key, equals, value = item.partition("=")
            if not equals:
                raise MalformedObjectNameError(f"Key property '{item}' in '{text}' is missing '='")
            if not key:
                raise MalformedObjectNameError(f"Empty key in '{text}'")
            if not value:
                raise MalformedObjectNameError(f"Empty value for key '{key}' in '{text}'")
            if _FORBIDDEN_PROPERTY_CHARS.intersection(key) or _FORBIDDEN_PROPERTY_CHARS.intersection(value):
                raise MalformedObjectNameError(f"Invalid character in key property '{item}' of '{text}'")
            if key in seen:
                raise MalformedObjectNameError(f"Duplicate key '{key}' in '{text}'")
            seen.add(key)
            properties.append((key, value))
        return cls(domain, tuple(properties))

    @property
    def canonical(self) -> str:
        joined = ",".join(f"{key}={value}" for key, value in sorted(self.properties))
        return f"{self.domain}:{joined}"

    def get(self, key: str) -> str | None:
        for candidate, value in self.properties:
            if candidate == key:
                return value
        return None

    def __str__(self) -> str:
        joined = ",".join(f"{key}={value}" for key, value in self.properties)
        return f"{self.domain}:{joined}"

    def __repr__(self) -> str:
        return f"ObjectName({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectName):
            return NotImplemented
        return self.canonical == other.canonical

    def __hash__(self) -> int:
        return hash(self.canonical)


def _as_object_name(name: ObjectName | str) -> ObjectName:
    if isinstance(name, ObjectName):
        return name
    return ObjectName.parse(name)


def _metric_name(namespace: str, attribute: str) -> str:
    snake = _CAMEL_BOUNDARY.sub("_", attribute).lower()
    return _METRIC_NAME_INVALID.sub("_", f"{namespace}_{snake}")


class ManagementServer:
    """Thread-safe name -> resource table with Prometheus exposition."""

    def __init__(self, namespace: str = "procstats") -> None:
        self._namespace = namespace
        self._lock = threading.Lock()
        self._resources: dict[ObjectName, ManagedResource] = {}
        self._collector_registry = CollectorRegistry(auto_describe=False)
        self._collector_registry.register(self)

    def register(self, resource: ManagedResource, name: ObjectName | str) -> ObjectName:
        object_name = _as_object_name(name)
        if not isinstance(resource, ManagedResource):
            raise ManagementError(f"{type(resource).__name__} does not expose management attributes")
        with self._lock:
            if object_name in self._resources:
                raise InstanceAlreadyExistsError(str(object_name))
            self._resources[object_name] = resource
        return object_name

    def unregister(self, name: ObjectName | str) -> None:
        object_name = _as_object_name(name)
        with self._lock:
            if self._resources.pop(object_name, None) is None:
                raise InstanceNotFoundError(str(object_name))

    def is_registered(self, name: ObjectName | str) -> bool:
        object_name = _as_object_name(name)
        with self._lock:
            return object_name in self._resources

    def get(self, name: ObjectName | str) -> ManagedResource:
        object_name = _as_object_name(name)
        with self._lock:
            try:
                return self._resources[object_name]
            except KeyError:
                raise InstanceNotFoundError(str(object_name)) from None

    def names(self) -> list[ObjectName]:
        with self._lock:
            return list(self._resources)

    def __len__(self) -> int:
        with self._lock:
            return len(self._resources)

    # -------- Prometheus collector protocol ---------

    def describe(self) -> list[Metric]:
        return []

    def collect(self) -> Iterator[Metric]:
        with self._lock:
            entries = list(self._resources.items())

        families: dict[str, GaugeMetricFamily] = {}
        for object_name, resource in entries:
            labels = [object_name.domain, object_name.get("type") or "", object_name.get("name") or ""]
            for attribute, value in resource.management_attributes().items():
                metric_name = _metric_name(self._namespace, attribute)
                family = families.get(metric_name)
                if family is None:
                    family = GaugeMetricFamily(
                        metric_name,
                        f"Managed attribute '{attribute}'",
                        labels=list(LABELS),
                    )
                    families[metric_name] = family
                family.add_metric(labels, float(value))
        yield from families.values()

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._collector_registry

    def exposition(self) -> bytes:
        """Render all registered resources in the Prometheus text format."""

        return generate_latest(self._collector_registry)
