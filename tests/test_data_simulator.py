"""
test_data_simulator.py — Unit tests for the synthetic data generator.

Tests cover:
    - Historical month generation (length, positivity, factor bounds)
    - Seed event generation (count, labels, revenue/profit bounds)
    - Live sale drawing (sales count distribution, floor, margin bounds)
"""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from live_dashboard.config import CompanyProfile
from live_dashboard.data_simulator import (
    draw_sales_count,
    generate_historical_months,
    generate_live_sale,
    generate_seed_events,
)


class _SequenceRng:
    """Stand-in generator whose random() returns a fixed sequence."""

    def __init__(self, values):
        self._values = iter(values)

    def random(self):
        return next(self._values)


# ---------------------------------------------------------------------------
# Historical months
# ---------------------------------------------------------------------------

class TestGenerateHistoricalMonths:
    """Tests for generate_historical_months."""

    @pytest.mark.parametrize("months_active", [1, 3, 14, 25])
    def test_returns_exactly_n_positive_values(self, months_active, rng):
        profile = CompanyProfile(months_active=months_active)
        months = generate_historical_months(profile, rng)
        assert len(months) == months_active
        assert all(isinstance(m, int) and m > 0 for m in months)

    def test_each_month_within_trend_season_noise_bounds(self, profile, rng):
        months = generate_historical_months(profile, rng)
        for m, revenue in enumerate(months):
            factor = (1 + 0.06 * (m // 3)) * (1 + 0.08 * math.sin(2 * math.pi * m / 12))
            expected = profile.base_monthly_revenue * factor
            assert expected * 0.91 - 1 <= revenue <= expected * 1.09 + 1

    def test_same_seed_is_reproducible(self, profile):
        a = generate_historical_months(profile, np.random.default_rng(3))
        b = generate_historical_months(profile, np.random.default_rng(3))
        assert a == b


# ---------------------------------------------------------------------------
# Seed events
# ---------------------------------------------------------------------------

class TestGenerateSeedEvents:
    """Tests for generate_seed_events."""

    def test_thirty_events_per_month(self, profile, rng):
        events = list(generate_seed_events([420_000, 430_000], profile, rng))
        assert len(events) == 60

    def test_labels_are_month_and_event_indexed(self, profile, rng):
        events = list(generate_seed_events([420_000, 430_000], profile, rng))
        assert events[0].time == "M1-E1"
        assert events[29].time == "M1-E30"
        assert events[30].time == "M2-E1"

    def test_event_revenue_within_multiplier_range(self, profile, rng):
        for event in generate_seed_events([420_000], profile, rng):
            assert 14_000 * 0.6 <= event.revenue <= 14_000 * 1.4

    def test_event_profit_within_operating_margin_band(self, profile, rng):
        for event in generate_seed_events([420_000], profile, rng):
            ratio = event.profit / event.revenue
            assert 0.18 * 0.9 - 1e-9 <= ratio <= 0.18 * 1.1 + 1e-9

    def test_custom_events_per_month(self, profile, rng):
        events = list(generate_seed_events([1000], profile, rng, events_per_month=5))
        assert len(events) == 5


# ---------------------------------------------------------------------------
# Live sales
# ---------------------------------------------------------------------------

class TestDrawSalesCount:
    """Tests for draw_sales_count."""

    def test_first_draw_below_sixty_percent_is_one(self):
        assert draw_sales_count(_SequenceRng([0.59])) == 1

    def test_second_draw_below_85_percent_is_two(self):
        assert draw_sales_count(_SequenceRng([0.6, 0.84])) == 2

    def test_otherwise_three(self):
        assert draw_sales_count(_SequenceRng([0.9, 0.9])) == 3

    def test_empirical_distribution(self):
        rng = np.random.default_rng(0)
        counts = [draw_sales_count(rng) for _ in range(20_000)]
        assert abs(counts.count(1) / 20_000 - 0.60) < 0.02
        assert abs(counts.count(2) / 20_000 - 0.34) < 0.02
        assert abs(counts.count(3) / 20_000 - 0.06) < 0.01


class TestGenerateLiveSale:
    """Tests for generate_live_sale."""

    def test_revenue_within_base_range(self, profile, rng):
        base = 420_000 / 30 / 8
        for _ in range(200):
            sale = generate_live_sale(profile, 1.0, rng, "09:00:00")
            assert base * 0.2 <= sale.revenue <= base * 2.0

    def test_zero_intensity_hits_minimum_sale(self, profile, rng):
        sale = generate_live_sale(profile, 0.0, rng, "09:00:00")
        assert sale.revenue == 20

    def test_intensity_scales_sale(self, profile):
        low = generate_live_sale(profile, 1.0, np.random.default_rng(5), "t")
        high = generate_live_sale(profile, 2.0, np.random.default_rng(5), "t")
        assert high.revenue == pytest.approx(low.revenue * 2)

    def test_profit_ratio_band(self, profile, rng):
        for _ in range(200):
            sale = generate_live_sale(profile, 1.0, rng, "t")
            ratio = sale.profit / sale.revenue
            assert 0.18 * 0.9 - 1e-9 <= ratio <= 0.18 * 1.2 + 1e-9

    def test_time_label_carried(self, profile, rng):
        assert generate_live_sale(profile, 1.0, rng, "10:15:00").time == "10:15:00"
