"""
Application Layer - Use Cases and Services

This package contains application services that orchestrate domain logic:
the resilient upstream fetcher and the historical/latest rate orchestrator.
"""

from fxrate.application.resilience import CircuitBreaker, ResilientFetcher, RetryPolicy
from fxrate.application.rates_service import (
    RESTRICTED_CURRENCIES,
    HistoricalRateOrchestrator,
    historical_key,
    latest_key,
)

__all__ = [
    "RetryPolicy",
    "CircuitBreaker",
    "ResilientFetcher",
    "HistoricalRateOrchestrator",
    "RESTRICTED_CURRENCIES",
    "latest_key",
    "historical_key",
]
