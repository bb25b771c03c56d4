"""
Formatter Tests - Unit Tests for Message Formatting Functions

This module contains unit tests for the message formatting functions:
latest snapshots, conversion results, historical pages, status and errors.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- fxrate.adapters.formatting.formatter (all formatter functions for testing)
- fxrate.domain (models and errors for test data)
"""
from datetime import date
from decimal import Decimal

from fxrate.adapters.formatting.formatter import (
    format_conversion,
    format_error,
    format_history_page,
    format_latest,
    format_status,
)
from fxrate.domain.errors import (
    CircuitOpen,
    RestrictedCurrency,
    UpstreamRejected,
    UpstreamUnavailable,
)
from fxrate.domain.models import (
    CircuitBreakerState,
    CircuitStatus,
    ConversionResult,
    DailyRateSnapshot,
)
from fxrate.domain.pagination import paginate


def snapshot(day: int) -> DailyRateSnapshot:
    return DailyRateSnapshot(
        date=date(2024, 1, day),
        base="EUR",
        rates={"USD": Decimal("1.0934"), "GBP": Decimal("0.8598")},
    )


class TestFormatLatest:
    def test_all_rates_sorted(self):
        result = format_latest(snapshot(5))
        assert result == "💱 1 EUR — 2024-01-05\nGBP: 0.8598\nUSD: 1.0934"

    def test_symbol_subset(self):
        result = format_latest(snapshot(5), symbols=["usd"])
        assert "USD: 1.0934" in result
        assert "GBP" not in result

    def test_no_matching_symbols(self):
        assert format_latest(snapshot(5), symbols=["JPY"]).endswith("N/A")


class TestFormatConversion:
    def test_conversion(self):
        result = ConversionResult(
            from_currency="EUR",
            to_currency="USD",
            amount=Decimal("100"),
            converted_amount=Decimal("110.0"),
            rate=Decimal("1.1"),
            date=date(2024, 1, 5),
        )
        assert format_conversion(result) == "100 EUR = 110.0000 USD\nRate: 1.100000 (2024-01-05)"


class TestFormatHistoryPage:
    def test_middle_page(self):
        page = paginate([snapshot(n) for n in range(1, 6)], page=2, page_size=2)
        lines = format_history_page(page).splitlines()
        assert lines[0] == "2024-01-03 GBP=0.8598 USD=1.0934"
        assert lines[1].startswith("2024-01-04")
        assert lines[2] == "Page 2/3 · 5 day(s) · ◀ previous · next ▶"

    def test_empty_page(self):
        page = paginate([], page=1, page_size=10)
        assert format_history_page(page) == "No rates for this page.\nPage 1/0 · 0 day(s)"


class TestFormatStatus:
    def test_status(self):
        text = format_status(
            {
                "latest": CircuitBreakerState(),
                "historical": CircuitBreakerState(status=CircuitStatus.OPEN, consecutive_failures=2, opened_at=1.0),
            },
            ["historical:EUR"],
        )
        assert "✅ latest: closed (failures=0)" in text
        assert "❌ historical: open (failures=2)" in text
        assert "🗄 Cache entries: 1" in text
        assert "— historical:EUR" in text


class TestFormatError:
    def test_restricted_shows_detail(self):
        assert format_error(RestrictedCurrency("no TRY")) == "🚫 no TRY"

    def test_upstream_messages_hide_detail(self):
        assert "unavailable" in format_error(UpstreamUnavailable("socket closed"))
        assert "socket closed" not in format_error(UpstreamUnavailable("socket closed"))
        assert "paused" in format_error(CircuitOpen("open"))

    def test_rejected_request_points_at_the_currency(self):
        text = format_error(UpstreamRejected("latest rates for XYZ rejected: client error 404"))
        assert "rejected" in text
        assert "404" not in text
