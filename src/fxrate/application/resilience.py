# src/fxrate/application/resilience.py
"""
Resilient Fetcher - Retry and Circuit Breaker Around Upstream Calls

This module wraps the upstream rate provider with two composed policies:
a circuit breaker (outermost) and a retry policy with exponential backoff
(innermost). A tripped breaker fails fast before any attempt is made, and
all retry attempts of one call count as a single success or failure for
the breaker.

Defaults:
- Retry: 3 retries after the initial attempt, waiting 2, 4 and 8 seconds
- Breaker: opens after 2 consecutive failed calls, half-opens after 30 seconds

Files that USE this module:
- fxrate.application.rates_service (HistoricalRateOrchestrator fetches through ResilientFetcher)
- fxrate.app (composition root creates breakers, retry policy and fetcher)
- tests.test_resilience (unit tests)

Files that this module USES:
- fxrate.adapters.providers.base (UpstreamRateProvider, UpstreamError)
- fxrate.domain.models (DailyRateSnapshot, CircuitBreakerState, CircuitStatus)
- fxrate.domain.errors (UpstreamUnavailable, UpstreamRejected, CircuitOpen, OperationCancelled)
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import date
from typing import Callable, Dict, Optional, TypeVar

from fxrate.adapters.providers.base import UpstreamError, UpstreamRateProvider
from fxrate.domain.errors import (
    CircuitOpen,
    OperationCancelled,
    UpstreamRejected,
    UpstreamUnavailable,
)
from fxrate.domain.models import CircuitBreakerState, CircuitStatus, DailyRateSnapshot

log = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Retries retryable UpstreamErrors with exponential backoff."""

    def __init__(
        self,
        retries: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            retries: Additional attempts after the first one
            backoff_seconds: Multiplier for the 2**k delay before retry k
            sleep: Blocking sleep used between attempts when no cancel event is given
        """
        self.retries = retries
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def delay(self, retry_number: int) -> float:
        """Delay before retry k (1-based): backoff_seconds * 2**k."""
        return self.backoff_seconds * (2 ** retry_number)

    def _wait(self, seconds: float, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is None:
            self._sleep(seconds)
        elif cancel_event.wait(seconds):
            raise OperationCancelled("Upstream call cancelled during backoff")

    def run(
        self,
        operation: Callable[[], T],
        description: str = "upstream call",
        cancel_event: Optional[threading.Event] = None,
    ) -> T:
        """
        Run operation, retrying transient failures.

        Raises:
            UpstreamUnavailable: If every attempt failed or the failure is not retryable
            UpstreamRejected: If upstream refused the request with a non-retryable 4xx
            OperationCancelled: If cancel_event was set before or between attempts
        """
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelled(f"{description} cancelled")
            try:
                return operation()
            except UpstreamError as e:
                if not e.retryable:
                    if e.status_code is not None and 400 <= e.status_code < 500:
                        log.warning("%s rejected by upstream: %s", description, e)
                        raise UpstreamRejected(f"{description} rejected: {e}") from e
                    log.error("%s failed with non-retryable error: %s", description, e)
                    raise UpstreamUnavailable(f"{description} failed: {e}") from e
                if attempt == attempts:
                    log.error("%s failed after %d attempts: %s", description, attempts, e)
                    raise UpstreamUnavailable(
                        f"{description} failed after {attempts} attempts: {e}"
                    ) from e
                wait = self.delay(attempt)
                log.warning(
                    "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                    description, attempt, attempts, wait, e,
                )
                self._wait(wait, cancel_event)
        raise AssertionError("unreachable")


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker for one upstream endpoint.

    Closed -> Open after failure_threshold consecutive failed calls.
    Open -> HalfOpen once break_seconds have elapsed; exactly one trial call
    is admitted. The trial closes the breaker on success and reopens it
    (restarting the break timer) on failure.

    Every status change starts a new generation. before_call hands out the
    current generation and outcomes reported for an older one are ignored,
    so a slow call admitted before the breaker opened cannot settle a later
    trial.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 2,
        break_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.break_seconds = break_seconds
        self._clock = clock
        self._state = CircuitBreakerState()
        self._trial_in_flight = False
        self._generation = 0
        self._lock = threading.Lock()

    def snapshot(self) -> CircuitBreakerState:
        """Copy of the current state (status reflects an elapsed break)."""
        with self._lock:
            self._refresh()
            return CircuitBreakerState(
                status=self._state.status,
                consecutive_failures=self._state.consecutive_failures,
                opened_at=self._state.opened_at,
            )

    def _transition(self, status: CircuitStatus) -> None:
        """Set a new status and start a new generation. Caller holds the lock."""
        self._state.status = status
        self._generation += 1
        self._trial_in_flight = False

    def _refresh(self) -> None:
        """Move Open -> HalfOpen if the break has elapsed. Caller holds the lock."""
        state = self._state
        if state.status is CircuitStatus.OPEN and self._clock() - state.opened_at >= self.break_seconds:
            self._transition(CircuitStatus.HALF_OPEN)
            log.info("Circuit %s half-open, admitting one trial call", self.name)

    def _is_stale(self, generation: Optional[int]) -> bool:
        if generation is None or generation == self._generation:
            return False
        log.debug(
            "Circuit %s ignoring outcome from generation %d (now %d)",
            self.name, generation, self._generation,
        )
        return True

    def before_call(self) -> int:
        """
        Admit or reject a call.

        Returns:
            Generation token to pass back with the call's outcome

        Raises:
            CircuitOpen: While open, or while a half-open trial is already in flight
        """
        with self._lock:
            self._refresh()
            status = self._state.status
            if status is CircuitStatus.CLOSED:
                return self._generation
            if status is CircuitStatus.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                return self._generation
        log.warning("Circuit %s is %s, failing fast", self.name, status.value)
        raise CircuitOpen(f"Circuit {self.name} is open; upstream not called")

    def record_success(self, generation: Optional[int] = None) -> None:
        with self._lock:
            if self._is_stale(generation):
                return
            if self._state.status is not CircuitStatus.CLOSED:
                log.info("Circuit %s closed after successful trial call", self.name)
                self._transition(CircuitStatus.CLOSED)
            self._state.consecutive_failures = 0
            self._state.opened_at = None

    def record_failure(self, generation: Optional[int] = None) -> None:
        with self._lock:
            if self._is_stale(generation):
                return
            state = self._state
            state.consecutive_failures += 1
            self._trial_in_flight = False
            if state.status is CircuitStatus.HALF_OPEN or (
                state.status is CircuitStatus.CLOSED
                and state.consecutive_failures >= self.failure_threshold
            ):
                self._transition(CircuitStatus.OPEN)
                state.opened_at = self._clock()
                log.error(
                    "Circuit %s opened after %d consecutive failures (break %.0fs)",
                    self.name, state.consecutive_failures, self.break_seconds,
                )

    def release(self, generation: Optional[int] = None) -> None:
        """Free a half-open trial slot without recording an outcome."""
        with self._lock:
            if not self._is_stale(generation):
                self._trial_in_flight = False

    def call(self, operation: Callable[[], T]) -> T:
        """
        Run operation under the breaker.

        UpstreamUnavailable counts as a failure. UpstreamRejected and
        OperationCancelled count as neither: upstream answered, or the
        caller gave up.
        """
        generation = self.before_call()
        try:
            result = operation()
        except UpstreamUnavailable:
            self.record_failure(generation)
            raise
        except BaseException:
            self.release(generation)
            raise
        self.record_success(generation)
        return result


class ResilientFetcher:
    """Upstream access for latest and historical rates through breaker + retry."""

    def __init__(
        self,
        provider: UpstreamRateProvider,
        retry_policy: Optional[RetryPolicy] = None,
        latest_breaker: Optional[CircuitBreaker] = None,
        historical_breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Args:
            provider: Upstream collaborator
            retry_policy: Retry policy shared by both paths
            latest_breaker: Breaker for the latest-rates endpoint
            historical_breaker: Breaker for the date-range endpoint
        """
        self.provider = provider
        self.retry_policy = retry_policy or RetryPolicy()
        self.latest_breaker = latest_breaker or CircuitBreaker("latest")
        self.historical_breaker = historical_breaker or CircuitBreaker("historical")

    def _execute(
        self,
        breaker: CircuitBreaker,
        operation: Callable[[], T],
        description: str,
        cancel_event: Optional[threading.Event],
    ) -> T:
        return breaker.call(
            lambda: self.retry_policy.run(operation, description, cancel_event)
        )

    def fetch_latest(
        self, base_currency: str, cancel_event: Optional[threading.Event] = None
    ) -> DailyRateSnapshot:
        """
        Fetch the latest quote set for base_currency.

        Raises:
            CircuitOpen, UpstreamUnavailable, OperationCancelled
        """
        day, rates = self._execute(
            self.latest_breaker,
            lambda: self.provider.fetch_latest(base_currency),
            f"latest rates for {base_currency}",
            cancel_event,
        )
        return DailyRateSnapshot(date=day, base=base_currency, rates=rates)

    def fetch_range(
        self,
        base_currency: str,
        start: date,
        end: date,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[date, DailyRateSnapshot]:
        """
        Fetch daily snapshots for base_currency between start and end.

        Raises:
            CircuitOpen, UpstreamUnavailable, OperationCancelled
        """
        raw = self._execute(
            self.historical_breaker,
            lambda: self.provider.fetch_range(base_currency, start, end),
            f"historical rates for {base_currency} {start}..{end}",
            cancel_event,
        )
        return {
            day: DailyRateSnapshot(date=day, base=base_currency, rates=rates)
            for day, rates in raw.items()
        }

    def breaker_states(self) -> Dict[str, CircuitBreakerState]:
        return {
            self.latest_breaker.name: self.latest_breaker.snapshot(),
            self.historical_breaker.name: self.historical_breaker.snapshot(),
        }
