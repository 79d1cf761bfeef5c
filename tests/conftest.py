"""Shared fixtures for the live dashboard tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from live_dashboard.config import CompanyProfile, SimulationSettings
from live_dashboard.controls import DashboardSession
from live_dashboard.live_driver import SimulatedClock


class RecordingSink:
    """Sink that remembers how many times it was asked to render."""

    def __init__(self):
        self.renders = 0
        self.last_intensity = None

    def render(self, state, profile, intensity=None):
        self.renders += 1
        self.last_intensity = intensity


@pytest.fixture
def profile():
    return CompanyProfile()


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def clock():
    return SimulatedClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def session(profile, clock, sink):
    s = DashboardSession(
        profile,
        SimulationSettings(seed=7),
        rng=np.random.default_rng(7),
        sinks=[sink],
        clock=clock,
    )
    s.start()
    return s
