# src/fxrate/adapters/formatting/formatter.py
"""
Message Formatter - Text Formatting and Presentation

This module handles all text formatting for Telegram messages: latest
rate snapshots, conversion results, historical rate pages with a pager
footer, breaker/cache status, and user-facing error messages.

Files that USE this module:
- fxrate.adapters.telegram.handlers (uses all formatter functions for message display)
- tests.test_formatter (unit tests)

Files that this module USES:
- fxrate.domain.models (DailyRateSnapshot, ConversionResult, PaginatedResult, CircuitBreakerState)
- fxrate.domain.errors (ErrorKind for error messages)
"""
from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from fxrate.domain.errors import DomainError, ErrorKind
from fxrate.domain.models import (
    CircuitBreakerState,
    ConversionResult,
    DailyRateSnapshot,
    PaginatedResult,
)

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "⚠️ Invalid request: {detail}",
    ErrorKind.RESTRICTED_CURRENCY: "🚫 {detail}",
    ErrorKind.UNSUPPORTED_CURRENCY: "⚠️ {detail}",
    ErrorKind.UPSTREAM_REJECTED: "⚠️ The rate provider rejected this request. Check the currency code.",
    ErrorKind.UPSTREAM_UNAVAILABLE: "⚠️ Rate provider is unavailable right now. Please try again later.",
    ErrorKind.CIRCUIT_OPEN: "⏳ Rate provider is temporarily paused after repeated failures. Please try again shortly.",
    ErrorKind.CANCELLED: "⏹ Request cancelled.",
}


def _fmt_rate(value: Decimal, decimals: int = 4) -> str:
    """
    Format a rate with a fixed number of decimals.

    Args:
        value: Rate to format
        decimals: Number of decimal places (default: 4)

    Returns:
        String like '1.0934'
    """
    return f"{value:.{decimals}f}"


def format_latest(snapshot: DailyRateSnapshot, symbols: Optional[Iterable[str]] = None) -> str:
    """
    Format a latest-rates snapshot, one currency per line in code order.

    Args:
        snapshot: Snapshot to display
        symbols: Optional subset of currency codes to show

    Returns:
        Multi-line string with a title line and one line per rate
    """
    wanted = {s.upper() for s in symbols} if symbols else None
    lines = [f"💱 1 {snapshot.base} — {snapshot.date.isoformat()}"]
    for code in sorted(snapshot.rates):
        if wanted is not None and code not in wanted:
            continue
        lines.append(f"{code}: {_fmt_rate(snapshot.rates[code])}")
    if len(lines) == 1:
        lines.append("N/A")
    return "\n".join(lines)


def format_conversion(result: ConversionResult) -> str:
    """Format a conversion result as '100 EUR = 110.0000 USD' plus rate and date."""
    return (
        f"{result.amount} {result.from_currency} = "
        f"{_fmt_rate(result.converted_amount)} {result.to_currency}\n"
        f"Rate: {_fmt_rate(result.rate, 6)} ({result.date.isoformat()})"
    )


def format_history_page(result: PaginatedResult[DailyRateSnapshot]) -> str:
    """
    Format one page of historical snapshots.

    Each day is a line of 'YYYY-MM-DD CODE=rate ...'; a footer shows the
    page position and whether more pages exist.

    Args:
        result: Page of snapshots

    Returns:
        Multi-line string
    """
    lines: List[str] = []
    for snapshot in result.items:
        rates = " ".join(f"{c}={_fmt_rate(snapshot.rates[c])}" for c in sorted(snapshot.rates))
        lines.append(f"{snapshot.date.isoformat()} {rates}".rstrip())
    if not lines:
        lines.append("No rates for this page.")

    footer = f"Page {result.page}/{result.total_pages} · {result.total_items} day(s)"
    if result.has_previous_page:
        footer += " · ◀ previous"
    if result.has_next_page:
        footer += " · next ▶"
    lines.append(footer)
    return "\n".join(lines)


def format_status(breakers: Dict[str, CircuitBreakerState], cache_keys: Iterable[str]) -> str:
    """Format circuit breaker states and live cache keys."""
    lines = ["🩺 Status"]
    for name, state in sorted(breakers.items()):
        emoji = "✅" if state.status.value == "closed" else "❌"
        lines.append(
            f"{emoji} {name}: {state.status.value} (failures={state.consecutive_failures})"
        )
    keys = list(cache_keys)
    lines.append(f"🗄 Cache entries: {len(keys)}")
    lines.extend(f"— {k}" for k in keys)
    return "\n".join(lines)


def format_error(error: DomainError) -> str:
    """User-facing message for a domain error, chosen by its ErrorKind."""
    template = ERROR_MESSAGES.get(error.kind, "⚠️ {detail}")
    return template.format(detail=str(error))
