"""
scheduler.py — Live stream timers.

Two recurring jobs drive a DashboardSession:

    live_tick   — every `interval_seconds` (1s): 1–3 new sales
    feed_trim   — every `feed_trim_seconds` (5s): cap the feed at 80 entries

Real-time runs use an APScheduler BackgroundScheduler with a single worker
thread. Headless runs and tests use run_simulated(), which fires the same
callbacks from a SimulatedClock with no sleeping.

Usage:
    python scheduler.py                  # live stream until Ctrl+C
    python scheduler.py --config custom.yaml
"""

import argparse
import logging
import signal
import sys
import time
from typing import Callable, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from live_dashboard.config import load_config
from live_dashboard.controls import DashboardSession
from live_dashboard.live_driver import SimulatedClock

logger = logging.getLogger(__name__)

LIVE_JOB_ID = "live_tick"
TRIM_JOB_ID = "feed_trim"


def _guarded(job: Callable[[], object], name: str) -> Callable[[], None]:
    """Wrap a timer callback so one failing firing is logged, not fatal."""
    def _run() -> None:
        try:
            job()
        except Exception as exc:
            logger.error("%s job failed: %s", name, exc, exc_info=True)
    _run.__name__ = f"{name}_job"
    return _run


def schedule_live_stream(scheduler: BackgroundScheduler, session: DashboardSession) -> None:
    """(Re)register the live tick job; an existing job with the same id is replaced."""
    scheduler.add_job(
        _guarded(session.live_tick, LIVE_JOB_ID),
        trigger=IntervalTrigger(seconds=session.settings.interval_seconds),
        id=LIVE_JOB_ID,
        name="Live sales tick",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )


def build_scheduler(session: DashboardSession) -> BackgroundScheduler:
    """Create (but do not start) a scheduler with the live tick and feed trim jobs.

    Args:
        session: Started dashboard session.

    Returns:
        Configured BackgroundScheduler.
    """
    scheduler = BackgroundScheduler(
        executors={"default": ThreadPoolExecutor(max_workers=1)},
        job_defaults={"misfire_grace_time": 5},
    )
    schedule_live_stream(scheduler, session)
    scheduler.add_job(
        _guarded(session.trim_feed, TRIM_JOB_ID),
        trigger=IntervalTrigger(seconds=session.settings.feed_trim_seconds),
        id=TRIM_JOB_ID,
        name="Feed trim",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def run_simulated(
    session: DashboardSession,
    seconds: int,
    clock: SimulatedClock,
) -> int:
    """Advance a simulated clock one second at a time, firing due jobs.

    The live tick fires every `interval_seconds`, the feed trim every
    `feed_trim_seconds`, measured from the clock's starting time.

    Args:
        session: Started dashboard session whose driver reads `clock`.
        seconds: Simulated seconds to run.
        clock: Clock shared with the session's live driver.

    Returns:
        Number of sale events recorded.
    """
    settings = session.settings
    elapsed = 0.0
    next_tick = settings.interval_seconds
    next_trim = settings.feed_trim_seconds
    recorded = 0

    while elapsed < seconds:
        step = min(next_tick, next_trim) - elapsed
        if elapsed + step > seconds:
            break
        clock.advance(step)
        elapsed += step
        if elapsed >= next_tick:
            recorded += len(session.live_tick())
            next_tick += settings.interval_seconds
        if elapsed >= next_trim:
            session.trim_feed()
            next_trim += settings.feed_trim_seconds

    logger.info("Simulated %ds: %d sale events recorded", seconds, recorded)
    return recorded


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scheduler",
        description="Run the live sales stream in real time (no console).",
    )
    parser.add_argument("--config", default="config.yaml")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    from main import _configure_logging, build_session

    args = _parse_args(argv)
    try:
        cfg = load_config(args.config)
        log_dir = (cfg.get("paths") or {}).get("log_dir", "logs")
    except Exception:
        log_dir = "logs"
    _configure_logging(log_dir)

    try:
        session, cfg = build_session(args.config)
        session.start()
    except FileNotFoundError as exc:
        logger.error("Configuration missing: %s", exc)
        sys.exit(1)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)

    scheduler = build_scheduler(session)

    def _shutdown(sig, frame):
        logger.info("Shutdown signal — stopping scheduler")
        scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    scheduler.start()
    logger.info(
        "Live stream started -- tick every %.1fs, feed trim every %.1fs",
        session.settings.interval_seconds, session.settings.feed_trim_seconds,
    )
    while True:
        time.sleep(1)


if __name__ == "__main__":
    main()
