"""
data_simulator.py — Synthetic revenue and sale-event generator.

Produces the two kinds of fabricated data the dashboard runs on:

    1. Historical months   — one revenue figure per month the company has
                             been active, shaped by quarterly step growth,
                             yearly seasonality and noise
    2. Sale events         — small transactions, either split out of the
                             historical months (seeding) or drawn live on
                             every timer tick

Every function takes a NumPy Generator so runs are reproducible under a
fixed seed.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

import numpy as np

from live_dashboard.config import CompanyProfile
from live_dashboard.formatting import round_half_up

logger = logging.getLogger(__name__)

QUARTERLY_STEP_GROWTH = 0.06
SEASONAL_AMPLITUDE = 0.08
NOISE_SPREAD = 0.18

SEED_SALE_RANGE = (0.6, 1.4)
SEED_PROFIT_RANGE = (0.9, 1.1)
LIVE_SALE_RANGE = (0.2, 2.0)
LIVE_PROFIT_RANGE = (0.9, 1.2)


@dataclass(frozen=True)
class SaleEvent:
    """One synthetic transaction."""
    time: str
    revenue: float
    profit: float


def generate_historical_months(
    profile: CompanyProfile,
    rng: np.random.Generator,
) -> list[int]:
    """Generate one revenue figure per active month.

    revenue[m] = baseline × (1 + 0.06·⌊m/3⌋) × (1 + 0.08·sin(2πm/12)) × noise,
    with noise drawn uniformly from [0.91, 1.09].

    Args:
        profile: Company profile (baseline revenue, months active).
        rng: Seeded NumPy random generator.

    Returns:
        List of `profile.months_active` positive integers.
    """
    m = np.arange(profile.months_active)
    trend = 1 + QUARTERLY_STEP_GROWTH * (m // 3)
    season = 1 + SEASONAL_AMPLITUDE * np.sin(2 * np.pi * m / 12)
    noise = 1 + (rng.random(profile.months_active) - 0.5) * NOISE_SPREAD
    revenue = profile.base_monthly_revenue * trend * season * noise

    months = [round_half_up(float(v)) for v in revenue]
    logger.info(
        "Generated %d historical months (total revenue %d)", len(months), sum(months)
    )
    return months


def generate_seed_events(
    months: list[int],
    profile: CompanyProfile,
    rng: np.random.Generator,
    events_per_month: int = 30,
) -> Iterator[SaleEvent]:
    """Split each historical month into small sale events.

    Args:
        months: Monthly revenue sequence.
        profile: Company profile (operating margin).
        rng: Seeded NumPy random generator.
        events_per_month: Number of events per month.

    Yields:
        SaleEvent labelled 'M{month}-E{event}', both 1-based.
    """
    for mi, month_revenue in enumerate(months):
        avg_sale = month_revenue / events_per_month
        for e in range(events_per_month):
            sale = avg_sale * float(rng.uniform(*SEED_SALE_RANGE))
            profit = sale * profile.operating_margin * float(rng.uniform(*SEED_PROFIT_RANGE))
            yield SaleEvent(time=f"M{mi + 1}-E{e + 1}", revenue=sale, profit=profit)


def draw_sales_count(rng: np.random.Generator) -> int:
    """Number of sales in one live tick: 1 (60%), 2 (34%) or 3 (6%)."""
    if rng.random() < 0.6:
        return 1
    return 2 if rng.random() < 0.85 else 3


def generate_live_sale(
    profile: CompanyProfile,
    intensity: float,
    rng: np.random.Generator,
    time_label: str,
    min_sale: float = 20.0,
    sales_per_hour_divisor: float = 8.0,
) -> SaleEvent:
    """Draw a single live sale scaled by the intensity multiplier.

    Args:
        profile: Company profile.
        intensity: User-controlled multiplier on sale size.
        rng: Seeded NumPy random generator.
        time_label: Display time for the event.
        min_sale: Floor applied to every sale.
        sales_per_hour_divisor: Splits a daily revenue share into hourly sales.

    Returns:
        SaleEvent with revenue ≥ min_sale.
    """
    base = profile.base_monthly_revenue / 30 / sales_per_hour_divisor
    sale = max(min_sale, base * float(rng.uniform(*LIVE_SALE_RANGE)) * intensity)
    profit = sale * profile.operating_margin * float(rng.uniform(*LIVE_PROFIT_RANGE))
    return SaleEvent(time=time_label, revenue=sale, profit=profit)
