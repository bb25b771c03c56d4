"""
Provider Tests - Unit Tests for the Frankfurter API Provider

This module tests HTTP interactions, response parsing and error
classification (retryable vs non-retryable) of FrankfurterProvider.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- fxrate.adapters.providers.frankfurter (FrankfurterProvider for testing)
- fxrate.adapters.providers.base (UpstreamError)
- unittest.mock (Mock for API mocking)
- pytest (testing framework)
"""
import json
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from fxrate.adapters.providers.base import UpstreamError
from fxrate.adapters.providers.frankfurter import FrankfurterProvider


def make_response(status_code=200, payload=None, text=None):
    resp = Mock()
    resp.status_code = status_code
    body = text if text is not None else json.dumps(payload)

    def _json(**kwargs):
        return json.loads(body, **kwargs)

    resp.json.side_effect = _json
    return resp


@pytest.fixture
def session():
    s = Mock(spec=requests.Session)
    s.headers = {}
    return s


class TestFrankfurterProvider:
    def test_init_with_defaults(self, session):
        provider = FrankfurterProvider(session=session)
        assert provider.url == "https://api.frankfurter.app"
        assert provider.timeout == 10
        assert provider.retry_client_errors is False
        assert session.headers["Accept"] == "application/json"

    def test_init_with_custom_params(self, session):
        provider = FrankfurterProvider(base_url="http://test.com/", timeout=5, session=session)
        assert provider.url == "http://test.com"
        assert provider.timeout == 5

    def test_fetch_latest_success(self, session):
        session.get.return_value = make_response(payload={
            "amount": 1.0, "base": "EUR", "date": "2024-01-05",
            "rates": {"USD": 1.0934, "GBP": 0.8598},
        })
        provider = FrankfurterProvider(session=session)

        day, rates = provider.fetch_latest("EUR")

        assert day == date(2024, 1, 5)
        assert rates == {"USD": Decimal("1.0934"), "GBP": Decimal("0.8598")}
        session.get.assert_called_once_with(
            "https://api.frankfurter.app/latest", params={"from": "EUR"}, timeout=10
        )

    def test_fetch_range_success(self, session):
        session.get.return_value = make_response(payload={
            "amount": 1.0, "base": "EUR", "start_date": "2024-01-02", "end_date": "2024-01-03",
            "rates": {
                "2024-01-02": {"USD": 1.0956},
                "2024-01-03": {"USD": 1.0919},
            },
        })
        provider = FrankfurterProvider(session=session)

        result = provider.fetch_range("EUR", date(2024, 1, 2), date(2024, 1, 3))

        assert result == {
            date(2024, 1, 2): {"USD": Decimal("1.0956")},
            date(2024, 1, 3): {"USD": Decimal("1.0919")},
        }
        session.get.assert_called_once_with(
            "https://api.frankfurter.app/2024-01-02..2024-01-03", params={"from": "EUR"}, timeout=10
        )

    def test_timeout_is_retryable(self, session):
        session.get.side_effect = requests.exceptions.Timeout()
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="timeout") as exc:
            provider.fetch_latest("EUR")
        assert exc.value.retryable is True

    def test_connection_error_is_retryable(self, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="request failed") as exc:
            provider.fetch_latest("EUR")
        assert exc.value.retryable is True

    def test_server_error_is_retryable(self, session):
        session.get.return_value = make_response(status_code=503, payload={})
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="503") as exc:
            provider.fetch_latest("EUR")
        assert exc.value.retryable is True
        assert exc.value.status_code == 503

    def test_client_error_not_retryable_by_default(self, session):
        session.get.return_value = make_response(status_code=404, payload={"message": "not found"})
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="client error") as exc:
            provider.fetch_latest("XXX")
        assert exc.value.retryable is False

    def test_client_error_retryable_when_configured(self, session):
        session.get.return_value = make_response(status_code=429, payload={})
        provider = FrankfurterProvider(session=session, retry_client_errors=True)
        with pytest.raises(UpstreamError) as exc:
            provider.fetch_latest("EUR")
        assert exc.value.retryable is True

    def test_invalid_json(self, session):
        session.get.return_value = make_response(text="<html>")
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="invalid JSON") as exc:
            provider.fetch_latest("EUR")
        assert exc.value.retryable is False

    def test_missing_rates(self, session):
        session.get.return_value = make_response(payload={"base": "EUR"})
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="missing"):
            provider.fetch_range("EUR", date(2024, 1, 1), date(2024, 1, 2))

    def test_invalid_date_key(self, session):
        session.get.return_value = make_response(payload={"rates": {"yesterday": {"USD": 1}}})
        provider = FrankfurterProvider(session=session)
        with pytest.raises(UpstreamError, match="invalid date"):
            provider.fetch_range("EUR", date(2024, 1, 1), date(2024, 1, 2))
