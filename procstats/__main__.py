"""Command-line entrypoint: serve the statistics API or run the metrics demo."""

from __future__ import annotations

import argparse
import json
import time
from collections.abc import Callable, Sequence

from procstats.config import get_settings
from procstats.lib.logger import configure_logging
from procstats.statistics.metrics import MetricsRegistry, get_metrics


def run_demo(
    metrics: MetricsRegistry,
    iterations: int = 10,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, list[dict[str, object]]]:
    """Drive a parented timer and counter pair and return their snapshots."""

    timer_parent = metrics.get_timer("Parent")
    timer_normal = metrics.get_timer("Timer", timer_parent, type_name="Timer.detail")
    counter_parent = metrics.get_counter("Parent")
    counter_normal = metrics.get_counter("Counter", counter_parent, type_name="Counter.detail")

    for _ in range(iterations):
        with timer_normal.start():
            counter_normal.increment(1)
            sleep((100 + counter_normal.count) / 1000)
        counter_parent.increment(1)

    return {
        "counters": [snapshot.model_dump() for snapshot in metrics.list_counters()],
        "timers": [snapshot.model_dump() for snapshot in metrics.list_timers()],
    }


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the procstats package."""

    parser = argparse.ArgumentParser(prog="procstats", description=__doc__)
    parser.add_argument("--demo", action="store_true", help="run the counter/timer demo and print snapshots")
    parser.add_argument("--host", default=None, help="bind address (default: PROCSTATS_HOST)")
    parser.add_argument("--port", type=int, default=None, help="bind port (default: PROCSTATS_PORT)")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.demo:
        print(json.dumps(run_demo(get_metrics()), indent=2))
        return

    # Import lazily so logging is configured before the app module side effects
    import uvicorn

    uvicorn.run(
        "procstats.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
