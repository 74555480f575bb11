"""Tests for the management server and object names."""

from __future__ import annotations

import pytest

from procstats.lib.management import (
    InstanceAlreadyExistsError,
    InstanceNotFoundError,
    MalformedObjectNameError,
    ManagementError,
    ManagementServer,
    ObjectName,
)


class _Resource:
    def __init__(self, **attributes: float) -> None:
        self.attributes = attributes

    def management_attributes(self) -> dict[str, float]:
        return self.attributes


def test_object_name_parse_and_format() -> None:
    name = ObjectName.parse("org.example:type=Counter,name=Requests")

    assert name.domain == "org.example"
    assert name.get("type") == "Counter"
    assert name.get("name") == "Requests"
    assert name.get("missing") is None
    assert str(name) == "org.example:type=Counter,name=Requests"
    assert name.canonical == "org.example:name=Requests,type=Counter"


def test_object_name_equality_ignores_property_order() -> None:
    first = ObjectName.parse("d:type=Timer,name=x")
    second = ObjectName.parse("d:name=x,type=Timer")

    assert first == second
    assert hash(first) == hash(second)
    assert first != ObjectName.parse("d:type=Timer,name=y")


@pytest.mark.parametrize(
    "text",
    [
        "no-separator",
        "domain:",
        "domain:type",
        "domain:=value",
        "domain:type=",
        "domain:type=a,type=b",
        "domain:type=a=b",
        "domain:type=a:b",
        'domain:type="quoted"',
        "dom*ain:type=a",
        "domain:type=a?",
        "domain:type=a\nb",
    ],
)
def test_malformed_object_names(text: str) -> None:
    with pytest.raises(MalformedObjectNameError):
        ObjectName.parse(text)


def test_register_lookup_and_unregister() -> None:
    server = ManagementServer()
    resource = _Resource(count=1)

    registered = server.register(resource, "procstats:type=Counter,name=a")

    assert registered == ObjectName.parse("procstats:type=Counter,name=a")
    assert server.is_registered("procstats:name=a,type=Counter")
    assert server.get(registered) is resource
    assert server.names() == [registered]
    assert len(server) == 1

    server.unregister("procstats:type=Counter,name=a")
    assert not server.is_registered(registered)
    assert len(server) == 0


def test_duplicate_registration_rejected() -> None:
    server = ManagementServer()
    server.register(_Resource(count=1), "d:type=t,name=n")

    with pytest.raises(InstanceAlreadyExistsError):
        server.register(_Resource(count=2), "d:type=t,name=n")


def test_unknown_names_rejected() -> None:
    server = ManagementServer()

    with pytest.raises(InstanceNotFoundError):
        server.unregister("d:type=t,name=n")
    with pytest.raises(InstanceNotFoundError):
        server.get("d:type=t,name=n")


def test_register_requires_management_attributes() -> None:
    server = ManagementServer()

    with pytest.raises(ManagementError):
        server.register(object(), "d:type=t,name=n")  # type: ignore[arg-type]


def test_prometheus_exposition() -> None:
    server = ManagementServer()
    server.register(_Resource(count=3), "procstats:type=Counter,name=Requests")
    server.register(_Resource(count=5), "procstats:type=Counter,name=Errors")
    server.register(_Resource(totalCalls=2, average_time=12.5), "procstats:type=Timer,name=Query")

    registry = server.collector_registry
    assert registry.get_sample_value(
        "procstats_count", {"domain": "procstats", "type": "Counter", "name": "Requests"}
    ) == 3.0
    assert registry.get_sample_value(
        "procstats_count", {"domain": "procstats", "type": "Counter", "name": "Errors"}
    ) == 5.0
    assert registry.get_sample_value(
        "procstats_total_calls", {"domain": "procstats", "type": "Timer", "name": "Query"}
    ) == 2.0
    assert registry.get_sample_value(
        "procstats_average_time", {"domain": "procstats", "type": "Timer", "name": "Query"}
    ) == 12.5

    text = server.exposition().decode("utf-8")
    assert "# TYPE procstats_count gauge" in text
    assert "Requests" in text


def test_exposition_tracks_unregistration() -> None:
    server = ManagementServer()
    server.register(_Resource(count=1), "procstats:type=Counter,name=gone")
    server.unregister("procstats:type=Counter,name=gone")

    assert server.collector_registry.get_sample_value(
        "procstats_count", {"domain": "procstats", "type": "Counter", "name": "gone"}
    ) is None
