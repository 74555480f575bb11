"""Pytest fixtures for procstats tests."""

from collections.abc import AsyncIterator
import os

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("PROCSTATS_LOG_LEVEL", "INFO")
os.environ.setdefault("PROCSTATS_MANAGEMENT_ENABLED", "true")

from procstats.config import Settings
from procstats.lib.management import ManagementServer
from procstats.main import create_app
from procstats.statistics.metrics import MetricsRegistry


class FakeClock:
    """Manually advanced clock usable as both wall and monotonic source."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def management() -> ManagementServer:
    """Return a fresh management server per test."""
    return ManagementServer()


@pytest.fixture()
def metrics(management: ManagementServer) -> MetricsRegistry:
    """Return a fresh metrics registry backed by real clocks."""
    return MetricsRegistry(management)


@pytest.fixture()
def clocked_metrics(management: ManagementServer, clock: FakeClock) -> MetricsRegistry:
    """Return a fresh metrics registry whose timers read the fake clock."""
    return MetricsRegistry(management, clock=clock, monotonic=clock)


@pytest.fixture()
def app(metrics: MetricsRegistry) -> FastAPI:
    """Return an application bound to the per-test registry."""
    return create_app(metrics, Settings(PROCSTATS_HTTP_TIMING=True))


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an `httpx.AsyncClient` configured for the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
