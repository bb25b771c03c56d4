"""
Shared Test Fixtures - Fake Clock, Sleep and Upstream Provider

Files that USE this module:
- pytest (fixtures are injected into test modules)

Files that this module USES:
- fxrate.adapters.providers.base (UpstreamRateProvider, UpstreamError)
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from fxrate.adapters.providers.base import UpstreamError, UpstreamRateProvider


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Records requested delays and advances an optional clock instead of blocking."""

    def __init__(self, clock: FakeClock = None):
        self.delays = []
        self.clock = clock

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


def rates_for(day: date) -> dict:
    """Deterministic rate map for a day."""
    return {"USD": Decimal("1.1") + Decimal(day.day) / 1000, "GBP": Decimal("0.85")}


class FakeProvider(UpstreamRateProvider):
    """
    Upstream stand-in that quotes every day in a requested range.

    failures: number of upcoming calls (of either kind) that raise UpstreamError.
    unknown_bases: base currencies answered with a non-retryable 404.
    """

    def __init__(self, latest_date: date = date(2024, 1, 10), latest_rates=None):
        self.latest_date = latest_date
        self.latest_rates = latest_rates or {"USD": Decimal("1.1"), "GBP": Decimal("0.85")}
        self.failures = 0
        self.fail_always = False
        self.error = UpstreamError("boom", status_code=503)
        self.skip_days = set()
        self.unknown_bases = set()
        self.latest_calls = []
        self.range_calls = []

    def _maybe_fail(self, base_currency):
        if base_currency in self.unknown_bases:
            raise UpstreamError("client error 404: not found", status_code=404, retryable=False)
        if self.fail_always:
            raise self.error
        if self.failures > 0:
            self.failures -= 1
            raise self.error

    def fetch_latest(self, base_currency):
        self.latest_calls.append(base_currency)
        self._maybe_fail(base_currency)
        return self.latest_date, dict(self.latest_rates)

    def fetch_range(self, base_currency, start, end):
        self.range_calls.append((base_currency, start, end))
        self._maybe_fail(base_currency)
        result = {}
        day = start
        while day <= end:
            if day not in self.skip_days:
                result[day] = rates_for(day)
            day += timedelta(days=1)
        return result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep(clock):
    return RecordingSleep(clock)


@pytest.fixture
def provider():
    return FakeProvider()
