# src/fxrate/application/rates_service.py
"""
Rates Service - Business Logic for Exchange Rate Operations

This module contains the core business logic for exchange rate operations:
latest rates (cache-aside), currency conversion, and paginated historical
rates backed by a cache that is filled gap by gap.

Historical flow:
1. Read the cached entry for the base currency (absent = empty)
2. Compute the missing day ranges for [start, end]
3. Fetch each missing range through the ResilientFetcher
4. Merge every fetched range into the cache (refreshing the TTL)
5. Filter the merged map to [start, end] and sort by date
6. Paginate

A request either resolves every requested day or fails; ranges fetched
before a failure stay cached for later requests.

Files that USE this module:
- fxrate.adapters.telegram.handlers (latest, convert and history commands)
- fxrate.app (composition root creates the orchestrator)
- tests.test_rates_service (unit tests)

Files that this module USES:
- fxrate.application.resilience (ResilientFetcher for upstream access)
- fxrate.adapters.persistence.rate_cache (RateCacheStore)
- fxrate.domain (models, errors, compute_gaps, paginate)
- fxrate.shared.validators (currency code normalization)
"""
from __future__ import annotations  # Enable postponed evaluation of annotations

import logging  # Standard library for logging messages
import threading  # Cancel events for in-flight upstream calls
from datetime import date  # Calendar days
from decimal import Decimal  # Exact conversion arithmetic
from typing import AbstractSet, Dict, Iterable, List, Optional

from fxrate.adapters.persistence.rate_cache import RateCacheStore
from fxrate.application.resilience import ResilientFetcher
from fxrate.domain.errors import RestrictedCurrency, UnsupportedCurrency, ValidationError
from fxrate.domain.gaps import compute_gaps, iter_days
from fxrate.domain.models import (
    ConversionResult,
    DailyRateSnapshot,
    PaginatedResult,
    RateCacheEntry,
)
from fxrate.domain.pagination import paginate
from fxrate.shared.validators import normalize_currency_code

log = logging.getLogger(__name__)

RESTRICTED_CURRENCIES = frozenset({"TRY", "PLN", "THB", "MXN"})

DEFAULT_LATEST_TTL = 5 * 60.0
DEFAULT_HISTORICAL_TTL = 60 * 60.0


def latest_key(base_currency: str) -> str:
    return f"latest:{base_currency}"


def historical_key(base_currency: str) -> str:
    return f"historical:{base_currency}"


class HistoricalRateOrchestrator:
    """
    High-level service combining the cache store, gap analysis and the
    resilient upstream fetcher.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        store: RateCacheStore,
        latest_ttl: float = DEFAULT_LATEST_TTL,
        historical_ttl: float = DEFAULT_HISTORICAL_TTL,
        restricted_currencies: AbstractSet[str] = RESTRICTED_CURRENCIES,
    ):
        """
        Args:
            fetcher: Upstream access with retry and circuit breaking
            store: Shared cache store
            latest_ttl: TTL in seconds for latest snapshots
            historical_ttl: TTL in seconds for historical entries
            restricted_currencies: Currencies rejected by policy
        """
        self.fetcher = fetcher
        self.store = store
        self.latest_ttl = latest_ttl
        self.historical_ttl = historical_ttl
        self.restricted_currencies = frozenset(c.upper() for c in restricted_currencies)

    def _check_restricted(self, *currencies: str) -> None:
        blocked = sorted(c for c in currencies if c in self.restricted_currencies)
        if blocked:
            raise RestrictedCurrency(
                f"Requests involving {', '.join(sorted(self.restricted_currencies))} "
                f"are not allowed (got {', '.join(blocked)})"
            )

    # --- Latest rates ---

    def get_latest_rates(
        self, base_currency: str, cancel_event: Optional[threading.Event] = None
    ) -> DailyRateSnapshot:
        """
        Get the latest quote set for base_currency, cache-aside.

        Raises:
            ValidationError: If base_currency is not a currency code
            RestrictedCurrency: If base_currency is restricted
            UpstreamUnavailable, CircuitOpen: On upstream failure (cache miss only)
            UpstreamRejected: If upstream does not know base_currency
        """
        base = normalize_currency_code(base_currency)
        self._check_restricted(base)

        key = latest_key(base)
        entry = self.store.get(key)
        if entry is not None and entry.by_date:
            log.debug("Cache hit for latest %s", base)
            return max(entry.by_date.values(), key=lambda s: s.date)

        log.info("Cache miss for latest %s, fetching upstream", base)
        snapshot = self.fetcher.fetch_latest(base, cancel_event)
        fresh = RateCacheEntry(base_currency=base)
        fresh.upsert(snapshot)
        self.store.put(key, fresh, self.latest_ttl)
        return snapshot

    # --- Conversion ---

    def convert_currency(
        self,
        from_currency: str,
        to_currency: str,
        amount: Decimal,
        cancel_event: Optional[threading.Event] = None,
    ) -> ConversionResult:
        """
        Convert amount from one currency to another at the latest rate.

        Raises:
            ValidationError: If a code is malformed or amount is negative
            RestrictedCurrency: If either currency is restricted (checked before any upstream call)
            UnsupportedCurrency: If the target is absent from the base's rate set
            UpstreamUnavailable, CircuitOpen: On upstream failure
        """
        source = normalize_currency_code(from_currency)
        target = normalize_currency_code(to_currency)
        self._check_restricted(source, target)
        amount = Decimal(amount)
        if amount < 0:
            raise ValidationError(f"Amount must not be negative, got {amount}")

        snapshot = self.get_latest_rates(source, cancel_event)
        if target == source:
            rate = Decimal(1)
        else:
            rate = snapshot.rate_for(target)
            if rate is None:
                raise UnsupportedCurrency(f"Currency {target} not supported for base {source}")

        return ConversionResult(
            from_currency=source,
            to_currency=target,
            amount=amount,
            converted_amount=amount * rate,
            rate=rate,
            date=snapshot.date,
        )

    # --- Historical rates ---

    def get_historical_rates(
        self,
        base_currency: str,
        start_date: date,
        end_date: date,
        page: int = 1,
        page_size: int = 10,
        cancel_event: Optional[threading.Event] = None,
    ) -> PaginatedResult[DailyRateSnapshot]:
        """
        Get one page of daily snapshots for base_currency in [start_date, end_date].

        Only days missing from the cache are fetched upstream. On a full
        cache hit no upstream call and no cache write happen.

        Raises:
            ValidationError: If the range or paging arguments are invalid
            RestrictedCurrency: If base_currency is restricted
            UpstreamUnavailable, CircuitOpen: If any missing range cannot be fetched
            UpstreamRejected: If upstream does not know base_currency
        """
        base = normalize_currency_code(base_currency)
        if start_date > end_date:
            raise ValidationError(f"start date {start_date} is after end date {end_date}")
        if page < 1:
            raise ValidationError(f"page must be at least 1, got {page}")
        if page_size < 1:
            raise ValidationError(f"page size must be at least 1, got {page_size}")
        self._check_restricted(base)

        key = historical_key(base)
        cached = self.store.get(key)
        resolved: Dict[date, DailyRateSnapshot] = dict(cached.by_date) if cached else {}
        covered = cached.covered_dates() if cached else set()

        gaps = compute_gaps(covered, start_date, end_date)
        if gaps:
            log.info(
                "Historical %s %s..%s: %d missing range(s)",
                base, start_date, end_date, len(gaps),
            )
        else:
            log.info("Cache hit for historical %s %s..%s", base, start_date, end_date)

        for gap in gaps:
            try:
                fetched = self.fetcher.fetch_range(base, gap.start, gap.end, cancel_event)
            except Exception:
                log.error("Error fetching historical rates for %s %s..%s", base, gap.start, gap.end)
                raise
            unquoted = [day for day in iter_days(gap.start, gap.end) if day not in fetched]
            merged = self.store.merge(key, base, fetched.values(), self.historical_ttl, unquoted)
            resolved.update(merged.by_date)

        if gaps:
            # Pick up concurrent fills as well
            latest = self.store.get(key)
            if latest is not None:
                resolved.update(latest.by_date)

        ordered = _in_range(resolved.values(), start_date, end_date)
        return paginate(ordered, page, page_size)


def _in_range(snapshots: Iterable[DailyRateSnapshot], start: date, end: date) -> List[DailyRateSnapshot]:
    return sorted((s for s in snapshots if start <= s.date <= end), key=lambda s: s.date)

