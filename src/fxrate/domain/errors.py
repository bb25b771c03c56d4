# src/fxrate/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
business rule violations and upstream failures. Every exception carries
an ErrorKind tag so the presentation layer can map failures to responses
without inspecting exception classes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of domain failures."""
    VALIDATION = "validation"
    RESTRICTED_CURRENCY = "restricted_currency"
    UNSUPPORTED_CURRENCY = "unsupported_currency"
    UPSTREAM_REJECTED = "upstream_rejected"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    CIRCUIT_OPEN = "circuit_open"
    CANCELLED = "cancelled"


# Transport-level status each kind maps to
STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.RESTRICTED_CURRENCY: 400,
    ErrorKind.UNSUPPORTED_CURRENCY: 400,
    ErrorKind.UPSTREAM_REJECTED: 400,
    ErrorKind.UPSTREAM_UNAVAILABLE: 502,
    ErrorKind.CIRCUIT_OPEN: 503,
    ErrorKind.CANCELLED: 499,
}


class DomainError(Exception):
    """Base exception for domain errors."""
    kind: ErrorKind

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(DomainError):
    """Raised when a date range, page, or currency argument is invalid."""
    kind = ErrorKind.VALIDATION


class RestrictedCurrency(DomainError):
    """Raised when a request involves a currency excluded by policy."""
    kind = ErrorKind.RESTRICTED_CURRENCY


class UnsupportedCurrency(DomainError):
    """Raised when the target currency is absent from the provider's rate set."""
    kind = ErrorKind.UNSUPPORTED_CURRENCY


class UpstreamRejected(DomainError):
    """Raised when upstream answers with a client error, e.g. an unknown base currency."""
    kind = ErrorKind.UPSTREAM_REJECTED


class UpstreamUnavailable(DomainError):
    """Raised when the upstream provider still fails after the retry budget."""
    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class CircuitOpen(DomainError):
    """Raised when the circuit breaker rejects a call without contacting upstream."""
    kind = ErrorKind.CIRCUIT_OPEN


class OperationCancelled(DomainError):
    """Raised when a caller cancels an in-flight upstream operation."""
    kind = ErrorKind.CANCELLED
