"""
config.py — Company profile and simulation settings.

Loads config.yaml once and exposes two frozen dataclasses:

    CompanyProfile      — the fictitious company being simulated
    SimulationSettings  — window sizes, timer cadence and live-sale tuning

Missing keys fall back to the defaults below so a partial config.yaml
(or none at all, in tests) still produces a working dashboard.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompanyProfile:
    """Static configuration for the simulated company."""
    name: str = "Vanguard Components"
    months_active: int = 14
    employees: int = 36
    base_monthly_revenue: float = 420_000
    gross_margin: float = 0.32
    operating_margin: float = 0.18

    def __post_init__(self) -> None:
        if self.months_active <= 0:
            raise ValueError(f"months_active must be positive, got {self.months_active}")
        if not self.base_monthly_revenue > 0:
            raise ValueError(
                f"base_monthly_revenue must be positive, got {self.base_monthly_revenue}"
            )
        for label, margin in (("gross_margin", self.gross_margin),
                              ("operating_margin", self.operating_margin)):
            if not 0 <= margin <= 1:
                raise ValueError(f"{label} must lie in [0, 1], got {margin}")

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "CompanyProfile":
        proj = cfg.get("project", {}) or {}
        defaults = cls()
        return cls(
            name=str(proj.get("company_name", defaults.name)),
            months_active=int(proj.get("months_active", defaults.months_active)),
            employees=int(proj.get("employees", defaults.employees)),
            base_monthly_revenue=float(
                proj.get("base_monthly_revenue", defaults.base_monthly_revenue)
            ),
            gross_margin=float(proj.get("gross_margin", defaults.gross_margin)),
            operating_margin=float(proj.get("operating_margin", defaults.operating_margin)),
        )


@dataclass(frozen=True)
class SimulationSettings:
    """Tunables for seeding, the rolling window, the feed and the live timer."""
    seed: Optional[int] = None
    events_per_month: int = 30
    window_size: int = 600
    feed_visible_limit: int = 50
    feed_trim_limit: int = 80
    interval_seconds: float = 1.0
    feed_trim_seconds: float = 5.0
    intensity: float = 1.0
    min_sale: float = 20.0
    sales_per_hour_divisor: float = 8.0

    def __post_init__(self) -> None:
        for label in ("events_per_month", "window_size", "feed_visible_limit",
                      "feed_trim_limit"):
            if getattr(self, label) <= 0:
                raise ValueError(f"{label} must be positive, got {getattr(self, label)}")
        if self.interval_seconds <= 0 or self.feed_trim_seconds <= 0:
            raise ValueError("timer intervals must be positive")
        validate_intensity(self.intensity)

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "SimulationSettings":
        sim = cfg.get("data_simulation", {}) or {}
        live = cfg.get("live", {}) or {}
        d = cls()
        seed = sim.get("seed", d.seed)
        return cls(
            seed=None if seed is None else int(seed),
            events_per_month=int(sim.get("events_per_month", d.events_per_month)),
            window_size=int(sim.get("window_size", d.window_size)),
            feed_visible_limit=int(sim.get("feed_visible_limit", d.feed_visible_limit)),
            feed_trim_limit=int(sim.get("feed_trim_limit", d.feed_trim_limit)),
            interval_seconds=float(live.get("interval_seconds", d.interval_seconds)),
            feed_trim_seconds=float(live.get("feed_trim_seconds", d.feed_trim_seconds)),
            intensity=float(live.get("intensity", d.intensity)),
            min_sale=float(live.get("min_sale", d.min_sale)),
            sales_per_hour_divisor=float(
                live.get("sales_per_hour_divisor", d.sales_per_hour_divisor)
            ),
        )


def validate_intensity(value: float) -> float:
    """Return the intensity multiplier as a float, rejecting negative or non-finite values."""
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"intensity must be a finite, non-negative number, got {value}")
    return value


def load_config(config_path: str = "config.yaml") -> dict[str, Any]:
    """Read and parse the YAML configuration file.

    Args:
        config_path: Path to configuration YAML.

    Returns:
        Parsed configuration dict (empty dict for an empty file).

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r") as fh:
        cfg = yaml.safe_load(fh) or {}
    logger.debug("Loaded config from %s (%d sections)", path, len(cfg))
    return cfg
