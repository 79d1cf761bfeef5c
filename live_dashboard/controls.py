"""
controls.py — Dashboard session and user controls.

DashboardSession owns the simulation state, the live driver and the
render sinks, and exposes the actions a user can take:

    toggle_pause()      — flip the running flag, return the button label
    reset(confirm)      — confirmed full re-bootstrap
    set_intensity(x)    — live sale size multiplier
    export_csv(path)    — data point window as CSV text / file
    export_excel(path)  — workbook snapshot

Every action and every timer callback takes the session lock, so a
timer firing and a console command never interleave.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

import numpy as np

from live_dashboard.config import CompanyProfile, SimulationSettings
from live_dashboard.data_simulator import SaleEvent
from live_dashboard.event_stream import StreamState, bootstrap, points_frame, reset, trim_feed
from live_dashboard.excel_pack import generate_excel_pack
from live_dashboard.formatting import round_half_up, slugify
from live_dashboard.live_driver import TIME_FORMAT, LiveDriver

logger = logging.getLogger(__name__)

CSV_HEADER = ["time", "cumulativeProfit", "revenue"]
RESET_PROMPT = "Reset live simulation and historical seed?"


class DashboardSink(Protocol):
    def render(self, state: StreamState, profile: CompanyProfile,
               intensity: Optional[float] = None): ...


def pause_label(running: bool) -> str:
    """Text for the pause/resume control given the current running flag."""
    return "Pause" if running else "Resume"


def export_filename(profile: CompanyProfile) -> str:
    """Default CSV filename, e.g. 'vanguard_components_profit_stream.csv'."""
    return f"{slugify(profile.name)}_profit_stream.csv"


def build_csv(state: StreamState) -> str:
    """Serialise the data point window.

    Returns:
        Header line plus one line per retained point, profit and revenue
        rounded half-up to integers, no trailing newline.
    """
    df = points_frame(state)
    out = df.rename(columns={"profit": "cumulativeProfit"})[CSV_HEADER].copy()
    out["cumulativeProfit"] = [round_half_up(v) for v in out["cumulativeProfit"]]
    out["revenue"] = [round_half_up(v) for v in out["revenue"]]
    return out.to_csv(index=False, lineterminator="\n").rstrip("\n")


class DashboardSession:
    """Wires state, live driver and sinks together behind user-facing actions."""

    def __init__(
        self,
        profile: CompanyProfile,
        settings: SimulationSettings = SimulationSettings(),
        rng: Optional[np.random.Generator] = None,
        sinks: Iterable[DashboardSink] = (),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.profile = profile
        self.settings = settings
        self.rng = rng if rng is not None else np.random.default_rng(settings.seed)
        self.sinks = list(sinks)
        self.state = StreamState(window_size=settings.window_size)
        self.driver = LiveDriver(self.state, profile, self.rng, settings, clock)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initial bootstrap: months, seeded stream, quarterly reports."""
        with self._lock:
            bootstrap(self.state, self.profile, self.rng, self.settings, self._now_label())
            logger.info(
                "Session started for %s -- %d points, %d quarters",
                self.profile.name, len(self.state.data_points), len(self.state.reports),
            )
            self.render()

    def _now_label(self) -> str:
        return self.driver.clock().strftime(TIME_FORMAT)

    def render(self) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.render(self.state, self.profile, self.driver.intensity)

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def live_tick(self) -> list[SaleEvent]:
        with self._lock:
            events = self.driver.tick()
            if events:
                self.render()
            return events

    def trim_feed(self) -> int:
        with self._lock:
            removed = trim_feed(self.state, self.settings.feed_trim_limit)
            if removed:
                self.render()
            return removed

    # ------------------------------------------------------------------
    # User controls
    # ------------------------------------------------------------------

    def toggle_pause(self) -> str:
        with self._lock:
            self.state.running = not self.state.running
            label = pause_label(self.state.running)
            logger.info("Live stream %s", "resumed" if self.state.running else "paused")
            self.render()
            return label

    def reset(self, confirm: Callable[[str], bool]) -> bool:
        """Re-bootstrap the simulation if `confirm` accepts the prompt.

        Returns:
            True when the reset ran, False when it was declined.
        """
        if not confirm(RESET_PROMPT):
            logger.info("Reset declined")
            return False
        with self._lock:
            reset(self.state, self.profile, self.rng, self.settings, self._now_label())
            self.render()
        return True

    def set_intensity(self, value: float) -> float:
        with self._lock:
            self.driver.intensity = value
            logger.info("Intensity set to %.2f", self.driver.intensity)
            self.render()
            return self.driver.intensity

    def export_csv(self, path: Optional[Path] = None) -> str:
        """Build the CSV export and, when `path` is given, write it to disk."""
        with self._lock:
            text = build_csv(self.state)
        if path is not None:
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            logger.info("Exported %d points to %s", len(text.splitlines()) - 1, path)
        return text

    def export_excel(self, path: Path, brand: Optional[dict] = None) -> Path:
        with self._lock:
            return generate_excel_pack(self.state, self.profile, path, brand)
