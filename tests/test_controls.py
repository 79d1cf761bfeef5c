"""
test_controls.py — Unit tests for the dashboard session and user controls.

Tests cover:
    - Session bootstrap and rendering
    - Pause / resume
    - Confirmed and declined reset
    - Intensity changes
    - CSV export format and file output
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from live_dashboard.config import CompanyProfile
from live_dashboard.controls import RESET_PROMPT, build_csv, export_filename, pause_label
from live_dashboard.data_simulator import SaleEvent
from live_dashboard.event_stream import StreamState, record


class TestSessionStart:
    """Tests for DashboardSession.start."""

    def test_dashboard_never_empty_after_start(self, session):
        assert len(session.state.data_points) == 14 * 30
        assert len(session.state.reports) == 5
        assert session.state.cumulative_revenue > 0

    def test_start_renders(self, session, sink):
        assert sink.renders == 1
        assert sink.last_intensity == 1.0


class TestPause:
    """Tests for pause / resume."""

    def test_labels(self):
        assert pause_label(True) == "Pause"
        assert pause_label(False) == "Resume"

    def test_toggle_returns_next_label(self, session):
        assert session.toggle_pause() == "Resume"
        assert session.state.running is False
        assert session.toggle_pause() == "Pause"
        assert session.state.running is True

    def test_paused_tick_keeps_totals(self, session, sink):
        session.toggle_pause()
        renders = sink.renders
        points = len(session.state.data_points)
        profit = session.state.cumulative_profit
        assert session.live_tick() == []
        assert len(session.state.data_points) == points
        assert session.state.cumulative_profit == profit
        assert sink.renders == renders


class TestReset:
    """Tests for DashboardSession.reset."""

    def test_confirmed_reset_replays_bootstrap(self, session):
        for _ in range(5):
            session.live_tick()
        prompts = []

        def confirm(prompt):
            prompts.append(prompt)
            return True

        assert session.reset(confirm) is True
        assert prompts == [RESET_PROMPT]
        assert len(session.state.feed) == 0
        assert session.state.tick == 14 * 30
        assert len(session.state.data_points) == 14 * 30
        assert session.state.cumulative_revenue > 0

    def test_reset_stamps_points_with_reset_time(self, session, clock):
        clock.advance(90)
        session.reset(lambda prompt: True)
        assert {p.time for p in session.state.data_points} == {"09:01:30"}

    def test_declined_reset_leaves_state_untouched(self, session, sink):
        session.live_tick()
        tick = session.state.tick
        feed = list(session.state.feed)
        revenue = session.state.cumulative_revenue
        renders = sink.renders
        assert session.reset(lambda prompt: False) is False
        assert session.state.tick == tick
        assert list(session.state.feed) == feed
        assert session.state.cumulative_revenue == revenue
        assert sink.renders == renders


class TestIntensity:
    """Tests for DashboardSession.set_intensity."""

    def test_sets_driver_intensity(self, session):
        assert session.set_intensity(1.75) == 1.75
        assert session.driver.intensity == 1.75

    def test_invalid_intensity_raises(self, session):
        with pytest.raises(ValueError):
            session.set_intensity(-1)


class TestExport:
    """Tests for CSV export."""

    def _state_with_three_points(self):
        state = StreamState()
        record(state, SaleEvent("t1", 100.4, 10.6), visible=False)
        record(state, SaleEvent("t2", 200.5, 20.5), visible=False)
        record(state, SaleEvent("t3", 50.0, 5.0), visible=False)
        return state

    def test_three_points_give_four_lines(self):
        csv_text = build_csv(self._state_with_three_points())
        assert csv_text.splitlines() == [
            "time,cumulativeProfit,revenue",
            "t1,11,100",
            "t2,31,201",
            "t3,36,50",
        ]

    def test_seeded_points_carry_bootstrap_time(self, session):
        lines = build_csv(session.state).splitlines()
        assert lines[1].split(",")[0] == "09:00:00"
        assert lines[-1].split(",")[0] == "09:00:00"

    def test_empty_window_is_header_only(self):
        assert build_csv(StreamState()) == "time,cumulativeProfit,revenue"

    def test_filename_names_company_and_metric(self):
        assert export_filename(CompanyProfile()) == "vanguard_components_profit_stream.csv"

    def test_session_export_writes_file(self, session, tmp_path):
        path = tmp_path / "out" / "stream.csv"
        text = session.export_csv(path)
        assert path.read_text(encoding="utf-8") == text
        assert len(text.splitlines()) == len(session.state.data_points) + 1

    def test_session_excel_export(self, session, tmp_path):
        path = session.export_excel(tmp_path / "snapshot.xlsx")
        assert path.exists()
