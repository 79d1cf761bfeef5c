"""
event_stream.py — Simulation state and its transitions.

All mutable dashboard state lives in one StreamState object:

    tick counter, running totals   — cumulative revenue / profit
    data point window              — most recent N points for chart + export
    feed                           — recent visible sales, newest first
    months, reports                — current historical run
    running                        — pause/resume flag read by the live driver

The functions here only mutate StreamState. None of them render; the
session in controls.py calls the sinks after each operation.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from live_dashboard.config import CompanyProfile, SimulationSettings
from live_dashboard.data_simulator import (
    SaleEvent,
    generate_historical_months,
    generate_seed_events,
)
from live_dashboard.metrics import (
    KpiSummary,
    QuarterlyReport,
    build_quarterly_reports,
    compute_kpis,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 600
DEFAULT_FEED_VISIBLE_LIMIT = 50
DEFAULT_FEED_TRIM_LIMIT = 80


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DataPoint:
    """One point on the cumulative profit chart."""
    time: str
    revenue: float
    profit: float     # cumulative profit at insertion


@dataclass(frozen=True)
class FeedEntry:
    """One visible sale in the live feed."""
    time: str
    revenue: float


@dataclass
class StreamState:
    """Single owner of every piece of mutable dashboard state."""
    window_size: int = DEFAULT_WINDOW_SIZE
    tick: int = 0
    cumulative_revenue: float = 0.0
    cumulative_profit: float = 0.0
    running: bool = True
    data_points: deque = field(default_factory=deque)
    feed: deque = field(default_factory=deque)
    months: list = field(default_factory=list)
    reports: list = field(default_factory=list)

    def __post_init__(self) -> None:
        self.data_points = deque(self.data_points, maxlen=self.window_size)
        self.feed = deque(self.feed)

    @property
    def kpis(self) -> KpiSummary:
        return compute_kpis(self.cumulative_revenue, self.cumulative_profit)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def record(
    state: StreamState,
    event: SaleEvent,
    visible: bool,
    now_label: Optional[str] = None,
    feed_limit: int = DEFAULT_FEED_VISIBLE_LIMIT,
) -> DataPoint:
    """Apply one sale event to the totals, the window and (optionally) the feed.

    Args:
        state: Simulation state to mutate.
        event: Sale event to record.
        visible: Whether the sale appears in the feed.
        now_label: Insertion time stamped on the data point and feed entry;
            defaults to the event's own time label.
        feed_limit: Feed length enforced right after a visible record.

    Returns:
        The appended DataPoint.
    """
    state.tick += 1
    state.cumulative_revenue += event.revenue
    state.cumulative_profit += event.profit

    label = now_label or event.time
    point = DataPoint(time=label, revenue=event.revenue, profit=state.cumulative_profit)
    # deque(maxlen=window_size) evicts the oldest point on overflow
    state.data_points.append(point)

    if visible:
        state.feed.appendleft(FeedEntry(time=label, revenue=event.revenue))
        _drop_oldest(state.feed, feed_limit)
    return point


def trim_feed(state: StreamState, limit: int = DEFAULT_FEED_TRIM_LIMIT) -> int:
    """Drop the oldest feed entries beyond `limit`.

    Returns:
        Number of entries removed.
    """
    removed = _drop_oldest(state.feed, limit)
    if removed:
        logger.debug("Trimmed %d feed entries (limit %d)", removed, limit)
    return removed


def seed(
    state: StreamState,
    months: list[int],
    profile: CompanyProfile,
    rng: np.random.Generator,
    events_per_month: int = 30,
    now_label: Optional[str] = None,
) -> int:
    """Replay the historical months as hidden sale events.

    Seeded events update totals and the window but bypass the feed. Every
    seeded point is stamped with `now_label`, the time of the bootstrap.

    Returns:
        Number of events recorded.
    """
    count = 0
    for event in generate_seed_events(months, profile, rng, events_per_month):
        record(state, event, visible=False, now_label=now_label)
        count += 1
    logger.info(
        "Seeded %d events from %d months (cumulative revenue %.0f)",
        count, len(months), state.cumulative_revenue,
    )
    return count


def clear(state: StreamState) -> None:
    """Zero the counters and totals and empty the window and feed."""
    state.tick = 0
    state.cumulative_revenue = 0.0
    state.cumulative_profit = 0.0
    state.data_points.clear()
    state.feed.clear()
    state.months = []
    state.reports = []


def bootstrap(
    state: StreamState,
    profile: CompanyProfile,
    rng: np.random.Generator,
    settings: SimulationSettings = SimulationSettings(),
    now_label: Optional[str] = None,
) -> list[QuarterlyReport]:
    """Generate a fresh historical run: months, seeded stream, quarterly reports.

    Returns:
        The new quarterly reports (also stored on the state).
    """
    state.months = generate_historical_months(profile, rng)
    seed(state, state.months, profile, rng, settings.events_per_month, now_label)
    state.reports = build_quarterly_reports(state.months, profile, rng)
    return state.reports


def reset(
    state: StreamState,
    profile: CompanyProfile,
    rng: np.random.Generator,
    settings: SimulationSettings = SimulationSettings(),
    now_label: Optional[str] = None,
) -> list[QuarterlyReport]:
    """Clear everything, then replay the bootstrap sequence."""
    logger.info("Resetting simulation state (tick was %d)", state.tick)
    clear(state)
    return bootstrap(state, profile, rng, settings, now_label)


def points_frame(state: StreamState) -> pd.DataFrame:
    """The data point window as a DataFrame with columns time, revenue, profit."""
    return pd.DataFrame(
        [(p.time, p.revenue, p.profit) for p in state.data_points],
        columns=["time", "revenue", "profit"],
    )


def _drop_oldest(feed: deque, limit: int) -> int:
    removed = 0
    while len(feed) > limit:
        feed.pop()
        removed += 1
    return removed
