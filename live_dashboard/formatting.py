"""
formatting.py — Currency and percentage display helpers.

Every figure shown on the dashboard (KPI tiles, feed, quarterly table)
and every integer written to the CSV export passes through these helpers,
so the rounding rule is the same everywhere.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up.

    Python's built-in round() uses banker's rounding; displayed totals
    round half-up instead.

    Args:
        value: Any finite float.

    Returns:
        Rounded integer.
    """
    return int(math.floor(value + 0.5))


def fmt_currency(value: float) -> str:
    """Format a USD value with thousands separators and no decimals.

    Args:
        value: Raw float value in USD.

    Returns:
        Formatted string, e.g. '$1,234,567' or '-$500'.
    """
    rounded = round_half_up(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def fmt_pct(value: float, decimals: int = 1) -> str:
    """Format a ratio as a percentage string.

    Args:
        value: Float (0.142 → '14.2%').
        decimals: Decimal places.

    Returns:
        Formatted percentage string.
    """
    return f"{value * 100:.{decimals}f}%"


def slugify(name: str) -> str:
    """Lower-case a company name into a filename stem ('Vanguard Components' → 'vanguard_components')."""
    words = "".join(ch if ch.isalnum() else " " for ch in name.lower()).split()
    return "_".join(words) or "company"
