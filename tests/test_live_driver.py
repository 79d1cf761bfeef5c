"""
test_live_driver.py — Unit tests for the per-tick live sale driver.

Tests cover:
    - tick() while running: 1–3 visible events stamped with clock time
    - tick() while paused: no-op
    - intensity validation
    - SimulatedClock
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from live_dashboard.config import SimulationSettings
from live_dashboard.event_stream import StreamState
from live_dashboard.live_driver import LiveDriver, SimulatedClock


@pytest.fixture
def driver(profile, rng, clock):
    return LiveDriver(StreamState(), profile, rng, SimulationSettings(), clock)


class TestTick:
    """Tests for LiveDriver.tick."""

    def test_records_one_to_three_visible_events(self, driver):
        for _ in range(50):
            before = driver.state.tick
            events = driver.tick()
            assert 1 <= len(events) <= 3
            assert driver.state.tick - before == len(events)

    def test_events_reach_feed_with_clock_label(self, driver):
        events = driver.tick()
        assert len(driver.state.feed) == len(events)
        assert driver.state.feed[0].time == "09:00:00"

    def test_paused_tick_is_noop(self, driver):
        driver.tick()
        driver.state.running = False
        points = len(driver.state.data_points)
        revenue = driver.state.cumulative_revenue
        profit = driver.state.cumulative_profit
        assert driver.tick() == []
        assert len(driver.state.data_points) == points
        assert driver.state.cumulative_revenue == revenue
        assert driver.state.cumulative_profit == profit

    def test_feed_stays_within_visible_limit(self, driver):
        for _ in range(100):
            driver.tick()
        assert len(driver.state.feed) <= 50

    def test_totals_non_decreasing(self, driver):
        last = 0.0
        for _ in range(30):
            driver.tick()
            assert driver.state.cumulative_profit >= last
            last = driver.state.cumulative_profit


class TestIntensity:
    """Tests for the intensity property."""

    def test_defaults_to_settings(self, driver):
        assert driver.intensity == 1.0

    def test_accepts_float(self, driver):
        driver.intensity = 2.5
        assert driver.intensity == 2.5

    @pytest.mark.parametrize("bad", [-0.1, float("nan"), float("inf")])
    def test_rejects_invalid(self, driver, bad):
        with pytest.raises(ValueError):
            driver.intensity = bad


class TestSimulatedClock:
    """Tests for SimulatedClock."""

    def test_starts_at_given_time(self):
        start = datetime(2025, 3, 1, 12, 0, 0)
        assert SimulatedClock(start)() == start

    def test_advance(self):
        clock = SimulatedClock(datetime(2025, 3, 1, 12, 0, 0))
        clock.advance(90)
        assert clock().strftime("%H:%M:%S") == "12:01:30"
