# src/fxrate/adapters/providers/frankfurter.py
"""
Frankfurter API Provider for Latest and Historical Exchange Rates

This module implements the Frankfurter API client (https://api.frankfurter.app)
for fetching the latest quotes and date-range time series for a base currency.
It only performs HTTP and parsing; retries, circuit breaking and caching are
layered on top by the application.

Files that USE this module:
- fxrate.app (composition root creates the provider)
- tests.test_providers (unit tests)

Files that this module USES:
- fxrate.adapters.providers.base (UpstreamRateProvider interface, UpstreamError)
- fxrate.config (settings for base URL and timeouts)
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from fxrate.adapters.providers.base import RateMap, UpstreamError, UpstreamRateProvider
from fxrate.config import settings

log = logging.getLogger(__name__)


class FrankfurterProvider(UpstreamRateProvider):
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
        retry_client_errors: Optional[bool] = None,
    ):
        """
        Initialize Frankfurter API provider.

        Args:
            base_url: Optional custom API URL (defaults to settings.upstream_base_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
            session: Optional requests session (one is created if omitted)
            retry_client_errors: Whether 4xx responses are marked retryable
        """
        self.url = (base_url or settings.upstream_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if retry_client_errors is None:
            retry_client_errors = settings.upstream_retry_client_errors
        self.retry_client_errors = retry_client_errors

    def _get_json(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        """
        GET url/path and decode the JSON body with Decimal floats.

        Raises:
            UpstreamError: On timeout, connection failure, non-2xx status or invalid JSON
        """
        url = f"{self.url}/{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            log.warning("Frankfurter API timeout after %d seconds: %s", self.timeout, url)
            raise UpstreamError(f"Frankfurter API timeout after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            log.warning("Frankfurter API request failed (network/connection error): %s", e)
            raise UpstreamError(f"Frankfurter API request failed: {e}") from e

        if resp.status_code >= 500:
            log.warning("Frankfurter API returned %d (server error) for %s", resp.status_code, url)
            raise UpstreamError(
                f"Frankfurter API returned {resp.status_code} (server error)",
                status_code=resp.status_code,
            )
        if resp.status_code >= 400:
            log.error("Frankfurter API returned %d (client error) for %s", resp.status_code, url)
            raise UpstreamError(
                f"Frankfurter API returned {resp.status_code} (client error)",
                status_code=resp.status_code,
                retryable=self.retry_client_errors,
            )

        try:
            data = resp.json(parse_float=Decimal)
        except ValueError as e:
            log.error("Frankfurter API returned invalid JSON: %s", e)
            raise UpstreamError(f"Frankfurter API returned invalid JSON: {e}", retryable=False) from e

        if not isinstance(data, dict):
            raise UpstreamError("Frankfurter returned non-dict JSON", retryable=False)
        return data

    @staticmethod
    def _parse_rates(raw: Any) -> RateMap:
        if not isinstance(raw, dict):
            raise UpstreamError(f"Frankfurter rates block is not an object: {raw!r}", retryable=False)
        try:
            return {str(code).upper(): Decimal(str(value)) for code, value in raw.items()}
        except (ArithmeticError, ValueError) as e:
            raise UpstreamError(f"Frankfurter schema error: {e}", retryable=False) from e

    @staticmethod
    def _parse_date(raw: Any) -> date:
        try:
            return date.fromisoformat(str(raw))
        except ValueError as e:
            raise UpstreamError(f"Frankfurter returned invalid date {raw!r}", retryable=False) from e

    def fetch_latest(self, base_currency: str) -> Tuple[date, RateMap]:
        """
        Get the latest published rates for base_currency.

        Expects: {"amount":1.0,"base":"EUR","date":"2024-01-05","rates":{"USD":1.09,...}}

        Returns:
            Tuple of (quote date, currency -> rate)
        """
        log.info("Fetching latest rates from Frankfurter for %s", base_currency)
        data = self._get_json("latest", {"from": base_currency})
        if "date" not in data or "rates" not in data:
            log.error("Frankfurter unexpected response structure: %s", data)
            raise UpstreamError("Frankfurter response missing 'date' or 'rates'", retryable=False)
        return self._parse_date(data["date"]), self._parse_rates(data["rates"])

    def fetch_range(self, base_currency: str, start: date, end: date) -> Mapping[date, RateMap]:
        """
        Get daily rates for base_currency between start and end.

        Frankfurter only quotes working days, so weekends and holidays are
        absent from the result, and the series may begin on the last working
        day before start.

        Returns:
            Mapping of quote date -> (currency -> rate)
        """
        path = f"{start.isoformat()}..{end.isoformat()}"
        log.info("Fetching historical rates from Frankfurter for %s %s", base_currency, path)
        data = self._get_json(path, {"from": base_currency})
        if "rates" not in data or not isinstance(data["rates"], dict):
            log.error("Frankfurter unexpected response structure: %s", data)
            raise UpstreamError("Frankfurter response missing 'rates'", retryable=False)
        return {
            self._parse_date(day): self._parse_rates(rates)
            for day, rates in data["rates"].items()
        }
