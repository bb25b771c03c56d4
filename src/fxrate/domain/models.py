# src/fxrate/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Daily exchange rate snapshots
- Historical cache entries
- Missing date ranges (gaps)
- Circuit breaker state
- Paginated result pages and conversion results

Files that USE this module:
- fxrate.domain.gaps (GapRange)
- fxrate.domain.pagination (PaginatedResult)
- fxrate.application.* (all services use domain models)
- fxrate.adapters.* (adapters create and use domain models)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import math  # Ceiling division for page counts
from dataclasses import dataclass, field  # Decorators for creating data classes
from datetime import date  # Calendar days (no time component)
from decimal import Decimal  # Exact decimal rates
from enum import Enum  # Breaker status values
from types import MappingProxyType  # Read-only view over rate maps
from typing import Dict, Generic, Mapping, Optional, Sequence, Set, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class DailyRateSnapshot:
    """
    A single day's quote set.

    Attributes:
        date: Calendar day the quotes belong to
        base: ISO code of the base currency
        rates: Mapping of ISO currency code to rate (units of target per 1 base)
    """
    date: date
    base: str
    rates: Mapping[str, Decimal]

    def __post_init__(self) -> None:
        # Freeze the rate map so the snapshot is immutable once constructed
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_for(self, currency: str) -> Optional[Decimal]:
        return self.rates.get(currency)


@dataclass
class RateCacheEntry:
    """
    Per base-currency cache unit.

    Attributes:
        base_currency: Base currency this entry belongs to
        by_date: Day -> snapshot map (by_date[d].date == d always holds)
        expires_at: Absolute expiry timestamp on the store's clock
        empty_dates: Days already asked of the upstream that carry no quote
    """
    base_currency: str
    by_date: Dict[date, DailyRateSnapshot] = field(default_factory=dict)
    expires_at: float = 0.0
    empty_dates: Set[date] = field(default_factory=set)

    def upsert(self, snapshot: DailyRateSnapshot) -> None:
        """Insert or replace the snapshot stored under its own date."""
        self.by_date[snapshot.date] = snapshot
        self.empty_dates.discard(snapshot.date)

    def covered_dates(self) -> Set[date]:
        """Days that need no upstream call: quoted days plus known empty days."""
        return set(self.by_date) | self.empty_dates

    def copy(self) -> "RateCacheEntry":
        return RateCacheEntry(
            base_currency=self.base_currency,
            by_date=dict(self.by_date),
            expires_at=self.expires_at,
            empty_dates=set(self.empty_dates),
        )


@dataclass(frozen=True)
class GapRange:
    """Inclusive span of calendar days missing from a cache entry."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"GapRange start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


class CircuitStatus(str, Enum):
    """Circuit breaker status values."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerState:
    """
    Mutable breaker state, owned by a single CircuitBreaker.

    Attributes:
        status: Current breaker status
        consecutive_failures: Failed calls since the last success
        opened_at: Clock reading when the breaker last opened (only meaningful while OPEN)
    """
    status: CircuitStatus = CircuitStatus.CLOSED
    consecutive_failures: int = 0
    opened_at: Optional[float] = None


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """
    One page of an ordered result set.

    Attributes:
        items: Items on this page (at most page_size)
        page: 1-based page number
        page_size: Maximum number of items per page
        total_items: Number of items across all pages
    """
    items: Sequence[T]
    page: int
    page_size: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size)

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages


@dataclass(frozen=True)
class ConversionResult:
    """Result of converting an amount between two currencies at the latest rate."""
    from_currency: str
    to_currency: str
    amount: Decimal
    converted_amount: Decimal
    rate: Decimal
    date: date
