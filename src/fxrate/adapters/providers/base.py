# src/fxrate/adapters/providers/base.py
"""
Base Provider Interface for Upstream Exchange Rate Providers

This module defines the abstract base class for upstream rate providers
and the transport error they raise. Providers are called only through
fxrate.application.resilience.ResilientFetcher.

Files that USE this module:
- fxrate.adapters.providers.frankfurter (FrankfurterProvider implements UpstreamRateProvider)
- fxrate.application.resilience (catches UpstreamError, calls providers)
- tests.* (fake providers in tests)

Files that this module USES:
- None (pure interface definition)
"""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Tuple

RateMap = Mapping[str, Decimal]


class UpstreamError(Exception):
    """Transport-level failure talking to the upstream provider."""

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class UpstreamRateProvider(ABC):
    @abstractmethod
    def fetch_latest(self, base_currency: str) -> Tuple[date, RateMap]:
        """Return the most recent quote day and its rates for base_currency."""
        raise NotImplementedError

    @abstractmethod
    def fetch_range(self, base_currency: str, start: date, end: date) -> Mapping[date, RateMap]:
        """Return rates per quoted day between start and end (inclusive)."""
        raise NotImplementedError
