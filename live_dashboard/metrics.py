"""
metrics.py — Quarterly report and KPI calculation engine.

Turns the monthly revenue sequence into quarterly reports and turns the
running totals into the three headline KPIs. Both outputs are read-only
dataclasses used by every downstream module (HTML dashboard, Excel pack,
console status line) as the single source of truth.

Quarterly reports:
    Revenue     — sum of the (up to) three months in the quarter
    Net profit  — revenue × (operating margin ± 2pp)
    Margin      — net profit / revenue
    Notes       — rule-based commentary keyed by quarter index and margin
"""

import logging
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd

from live_dashboard.config import CompanyProfile
from live_dashboard.formatting import round_half_up

logger = logging.getLogger(__name__)

MONTHS_PER_QUARTER = 3
MARGIN_JITTER = 0.02
HIGH_MARGIN_THRESHOLD = 0.20

# Evaluated in declaration order; each rule takes (quarter_index, revenue, net_profit).
NOTE_RULES = [
    (lambda q, rev, net: q == 1, "Launch quarter; strong direct-to-consumer uptake"),
    (lambda q, rev, net: q == 2, "Wholesale partnerships expanded"),
    (lambda q, rev, net: q == 3, "Subscription warranty introduced; margin uplift"),
    (lambda q, rev, net: q == 4, "Holiday season; peak sales"),
    (lambda q, rev, net: net / rev > HIGH_MARGIN_THRESHOLD,
     "Exceptional margin due to high-margin bundles"),
]


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuarterlyReport:
    """One row of the quarterly reports table."""
    quarter: str          # 'Q1', 'Q2', ...
    period: str           # 'Month 1 - 3'
    revenue: int
    net_profit: int
    profit_margin: float
    notes: str


@dataclass(frozen=True)
class KpiSummary:
    """Headline figures shown in the KPI bar."""
    revenue: int
    profit: int
    margin: float


# ---------------------------------------------------------------------------
# Quarterly reports
# ---------------------------------------------------------------------------

def generate_notes(revenue: float, net_profit: float, quarter_index: int) -> str:
    """Join every applicable commentary rule with '; '.

    Args:
        revenue: Quarter revenue (must be non-zero).
        net_profit: Quarter net profit.
        quarter_index: 1-based quarter number.

    Returns:
        Notes string, empty when no rule applies.
    """
    return "; ".join(
        text for rule, text in NOTE_RULES if rule(quarter_index, revenue, net_profit)
    )


def build_quarterly_reports(
    months: list[int],
    profile: CompanyProfile,
    rng: np.random.Generator,
) -> list[QuarterlyReport]:
    """Group consecutive months into quarters and compute profit per quarter.

    The final quarter is shorter when the month count is not a multiple of 3.

    Args:
        months: Monthly revenue sequence.
        profile: Company profile (operating margin).
        rng: Seeded NumPy random generator.

    Returns:
        Reports numbered Q1, Q2, ... in month order.
    """
    df = pd.DataFrame({"revenue": months})
    df["quarter"] = df.index // MONTHS_PER_QUARTER + 1
    df["month"] = df.index + 1
    grouped = df.groupby("quarter").agg(
        revenue=("revenue", "sum"),
        first_month=("month", "min"),
        last_month=("month", "max"),
    )

    reports = []
    for q_index, row in grouped.iterrows():
        revenue = int(row["revenue"])
        margin = profile.operating_margin + float(rng.uniform(-MARGIN_JITTER, MARGIN_JITTER))
        net_profit = round_half_up(revenue * margin)
        reports.append(QuarterlyReport(
            quarter=f"Q{q_index}",
            period=f"Month {row['first_month']} - {row['last_month']}",
            revenue=revenue,
            net_profit=net_profit,
            profit_margin=net_profit / revenue,
            notes=generate_notes(revenue, net_profit, int(q_index)),
        ))

    logger.info("Built %d quarterly reports from %d months", len(reports), len(months))
    return reports


def reports_frame(reports: list[QuarterlyReport]) -> pd.DataFrame:
    """Quarterly reports as a DataFrame (one row per quarter)."""
    columns = ["quarter", "period", "revenue", "net_profit", "profit_margin", "notes"]
    return pd.DataFrame([asdict(r) for r in reports], columns=columns)


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------

def compute_kpis(cumulative_revenue: float, cumulative_profit: float) -> KpiSummary:
    """Derive the KPI bar from the running totals.

    The margin denominator is floored at 1 so an empty stream shows 0.0%.
    """
    return KpiSummary(
        revenue=round_half_up(cumulative_revenue),
        profit=round_half_up(cumulative_profit),
        margin=cumulative_profit / max(cumulative_revenue, 1),
    )
