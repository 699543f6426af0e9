"""Shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from pws_bridge.bus import DataBus
from pws_bridge.scheduling import Scheduler


class FakeClock:
    """Drives both the scheduler's monotonic clock and the UTC wall clock."""

    def __init__(self, start: datetime) -> None:
        self.start = start
        self.seconds = 0.0
        self.sleeps = []

    def monotonic(self) -> float:
        return self.seconds

    def utcnow(self) -> datetime:
        return self.start + timedelta(seconds=self.seconds)

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.seconds += seconds

    def advance_to(self, seconds: float) -> None:
        self.seconds = seconds


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 17, 12, 0, 30, tzinfo=timezone.utc))


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock.monotonic, sleep=clock.sleep)


@pytest.fixture
def bus():
    return DataBus()
