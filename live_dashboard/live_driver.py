"""
live_driver.py — Live sale generator invoked on every timer tick.

The driver owns no timer itself. scheduler.py calls LiveDriver.tick()
once per interval, either from APScheduler in real time or from a
SimulatedClock loop in headless runs and tests.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

import numpy as np

from live_dashboard.config import CompanyProfile, SimulationSettings, validate_intensity
from live_dashboard.data_simulator import SaleEvent, draw_sales_count, generate_live_sale
from live_dashboard.event_stream import StreamState, record

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M:%S"


class SimulatedClock:
    """Manually advanced clock so ticks can be simulated without sleeping."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = start or datetime(2024, 1, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now += timedelta(seconds=seconds)
        return self._now


class LiveDriver:
    """Generates 1–3 visible sales per tick while the simulation is running."""

    def __init__(
        self,
        state: StreamState,
        profile: CompanyProfile,
        rng: np.random.Generator,
        settings: SimulationSettings = SimulationSettings(),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.state = state
        self.profile = profile
        self.rng = rng
        self.settings = settings
        self.clock = clock
        self._intensity = settings.intensity

    @property
    def intensity(self) -> float:
        return self._intensity

    @intensity.setter
    def intensity(self, value: float) -> None:
        self._intensity = validate_intensity(value)

    def tick(self) -> list[SaleEvent]:
        """Run one timer firing.

        Returns:
            The recorded events; empty when the simulation is paused.
        """
        if not self.state.running:
            return []

        label = self.clock().strftime(TIME_FORMAT)
        events = []
        for _ in range(draw_sales_count(self.rng)):
            event = generate_live_sale(
                self.profile,
                self._intensity,
                self.rng,
                time_label=label,
                min_sale=self.settings.min_sale,
                sales_per_hour_divisor=self.settings.sales_per_hour_divisor,
            )
            record(self.state, event, visible=True, now_label=label,
                   feed_limit=self.settings.feed_visible_limit)
            events.append(event)

        logger.debug(
            "Tick %s: %d sale(s), cumulative profit %.0f",
            label, len(events), self.state.cumulative_profit,
        )
        return events
