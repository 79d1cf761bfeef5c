"""
test_formatting.py — Unit tests for the display helpers.

Tests cover:
    - Half-up rounding
    - Currency and percentage strings
    - Filename slugs
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from live_dashboard.formatting import fmt_currency, fmt_pct, round_half_up, slugify


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_below_half_rounds_down(self):
        assert round_half_up(10.49) == 10

    def test_returns_int(self):
        assert isinstance(round_half_up(7.0), int)


class TestFmtCurrency:
    """Tests for fmt_currency."""

    def test_thousands_separator(self):
        assert fmt_currency(1_234_567) == "$1,234,567"

    def test_no_decimals(self):
        assert fmt_currency(1499.6) == "$1,500"

    def test_zero(self):
        assert fmt_currency(0) == "$0"

    def test_negative(self):
        assert fmt_currency(-500) == "-$500"


class TestFmtPct:
    """Tests for fmt_pct."""

    def test_one_decimal(self):
        assert fmt_pct(0.1834) == "18.3%"

    def test_zero(self):
        assert fmt_pct(0.0) == "0.0%"

    def test_custom_decimals(self):
        assert fmt_pct(0.5, decimals=0) == "50%"


class TestSlugify:
    """Tests for slugify."""

    def test_company_name(self):
        assert slugify("Vanguard Components") == "vanguard_components"

    def test_punctuation_collapsed(self):
        assert slugify("Acme, Inc.") == "acme_inc"

    def test_empty_name_falls_back(self):
        assert slugify("!!!") == "company"
