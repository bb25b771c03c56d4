"""
Domain Layer - Pure Business Objects

This package contains domain models, gap analysis, pagination and errors.
No dependencies on infrastructure or external systems.
"""

from fxrate.domain.models import (
    CircuitBreakerState,
    CircuitStatus,
    ConversionResult,
    DailyRateSnapshot,
    GapRange,
    PaginatedResult,
    RateCacheEntry,
)
from fxrate.domain.errors import (
    STATUS_BY_KIND,
    CircuitOpen,
    DomainError,
    ErrorKind,
    OperationCancelled,
    RestrictedCurrency,
    UnsupportedCurrency,
    UpstreamRejected,
    UpstreamUnavailable,
    ValidationError,
)
from fxrate.domain.gaps import compute_gaps, iter_days
from fxrate.domain.pagination import paginate

__all__ = [
    "DailyRateSnapshot",
    "RateCacheEntry",
    "GapRange",
    "CircuitStatus",
    "CircuitBreakerState",
    "PaginatedResult",
    "ConversionResult",
    "DomainError",
    "ErrorKind",
    "STATUS_BY_KIND",
    "ValidationError",
    "RestrictedCurrency",
    "UnsupportedCurrency",
    "UpstreamRejected",
    "UpstreamUnavailable",
    "CircuitOpen",
    "OperationCancelled",
    "compute_gaps",
    "iter_days",
    "paginate",
]
