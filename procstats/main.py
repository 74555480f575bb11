"""FastAPI application exposing in-process statistics."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import FastAPI
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from starlette.routing import Match

from procstats.config import Settings, get_settings
from procstats.lib.logger import configure_logging, get_logger
from procstats.statistics.metrics import MetricsRegistry, get_metrics
from procstats.statistics.routes import router as statistics_router

REQUESTS_TIMER = "http.requests"
UNMATCHED_TIMER = "http.unmatched"
RESPONSES_COUNTER = "http.responses"

logger = get_logger(__name__)


def _timer_name(app: FastAPI, request: Request) -> str:
    """Name the request timer after the matched route, or the shared unmatched timer.

    Only a full match puts the method into the name, so the set of timers is
    bounded by the routes the application declares.
    """
    for route in app.router.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            path = getattr(route, "path", None)
            if path is not None:
                return f"http.{request.method} {path}"
    return UNMATCHED_TIMER


def _install_request_timing(app: FastAPI, metrics: MetricsRegistry) -> None:
    requests_timer = metrics.get_timer(REQUESTS_TIMER)
    responses_counter = metrics.get_counter(RESPONSES_COUNTER)

    @app.middleware("http")
    async def time_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        timer = metrics.get_timer(_timer_name(app, request), requests_timer)
        with timer.start():
            response = await call_next(request)
        status_counter = metrics.get_counter(
            f"{RESPONSES_COUNTER}.{response.status_code // 100}xx", responses_counter
        )
        status_counter.increment(1)
        return response


def create_app(metrics: MetricsRegistry | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the statistics application around ``metrics`` (default: the shared registry)."""

    settings = settings or get_settings()
    metrics = metrics or get_metrics()

    app = FastAPI(title="procstats", version="0.1.0")
    app.state.metrics = metrics
    app.state.settings = settings

    if settings.http_timing_enabled:
        _install_request_timing(app, metrics)

    app.include_router(statistics_router, prefix="/statistics", tags=["statistics"])

    @app.get("/health", tags=["system"], summary="Health check")
    async def health_check() -> JSONResponse:
        """Return liveness response for uptime monitoring."""
        payload = {"ok": True, "data": {"status": "healthy"}}
        return JSONResponse(content=payload)

    logger.debug("Created statistics application", extra={"http_timing": settings.http_timing_enabled})
    return app


configure_logging(get_settings().log_level)
app = create_app()
