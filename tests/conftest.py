"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
from datetime import datetime, timedelta

import pytest

from supportbot.resolver import ResponseResolver
from supportbot.scheduling import PollingScheduler
from supportbot.skins import GENERIC, NIBBLY
from supportbot.tracking import DeliveryStatus, TrackingRecord


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> PollingScheduler:
    return PollingScheduler(clock)


@pytest.fixture
def wall_clock():
    """Deterministic timestamps, one second apart."""
    start = datetime(2024, 5, 1, 9, 30)
    ticks = iter(start + timedelta(seconds=i) for i in range(10_000))
    return lambda: next(ticks)


@pytest.fixture
def tracking() -> dict:
    return {
        "N001": TrackingRecord("N001", "over Riverside Park", 8, DeliveryStatus.IN_FLIGHT),
        "N003": TrackingRecord("N003", "at your drop point", 0, DeliveryStatus.DELIVERED),
    }


@pytest.fixture
def generic_resolver() -> ResponseResolver:
    return ResponseResolver(GENERIC)


@pytest.fixture
def nibbly_resolver(tracking: dict) -> ResponseResolver:
    return ResponseResolver(NIBBLY, tracking)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run without leftover configuration variables."""
    for var in list(os.environ):
        if var == "SUPPORTBOT_CONFIG" or var.startswith("SUPPORTBOT__"):
            monkeypatch.delenv(var, raising=False)
    yield
