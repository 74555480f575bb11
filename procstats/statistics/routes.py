"""Statistics routes exposing metric snapshots and process information."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from procstats.statistics import service
from procstats.statistics.metrics import MetricsRegistry
from procstats.statistics.schemas import StatisticsEnvelope

router = APIRouter()


def get_metrics_registry(request: Request) -> MetricsRegistry:
    metrics: MetricsRegistry | None = getattr(request.app.state, "metrics", None)
    if metrics is None:
        raise RuntimeError("Metrics registry not configured on application state")
    return metrics


def _envelope(data: object) -> JSONResponse:
    return JSONResponse(StatisticsEnvelope.wrap(data).model_dump(mode="json"))


@router.get("/counters", summary="List all counters")
async def counter_statistics(metrics: MetricsRegistry = Depends(get_metrics_registry)) -> JSONResponse:
    """Return every counter in the registry (unsorted)."""

    return _envelope([snapshot.model_dump() for snapshot in metrics.list_counters()])


@router.get("/timers", summary="List all timers")
async def timer_statistics(metrics: MetricsRegistry = Depends(get_metrics_registry)) -> JSONResponse:
    """Return call count, total and average time of every timer (unsorted)."""

    return _envelope([snapshot.model_dump() for snapshot in metrics.list_timers()])


@router.get("/memory", summary="Process memory usage")
async def memory_statistics() -> JSONResponse:
    return _envelope(service.memory_usage())


@router.get("/host", summary="Host properties")
async def host_statistics() -> JSONResponse:
    return _envelope(service.host_info())


@router.get("/system", summary="Interpreter properties")
async def system_statistics() -> JSONResponse:
    return _envelope(service.system_properties())


@router.get("/threads", response_class=PlainTextResponse, summary="Thread dump")
async def thread_statistics() -> PlainTextResponse:
    """Return a stack dump of all live threads as plain text."""

    return PlainTextResponse(service.thread_dump())


@router.get("/export", summary="Prometheus exposition of managed resources")
async def export_statistics(metrics: MetricsRegistry = Depends(get_metrics_registry)) -> Response:
    management = metrics.management
    if management is None:
        raise HTTPException(status_code=404, detail="Management server disabled")
    return Response(content=management.exposition(), media_type=CONTENT_TYPE_LATEST)
