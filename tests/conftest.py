"""Shared fixtures."""

from datetime import datetime, timezone

import pytest


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def now():
    # Wednesday
    return datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(now):
    return FixedClock(now)
