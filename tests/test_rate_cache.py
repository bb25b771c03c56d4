"""
Rate Cache Tests - Unit Tests for the In-Memory TTL Store

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- fxrate.adapters.persistence.rate_cache (RateCacheStore)
- fxrate.domain.models (RateCacheEntry, DailyRateSnapshot)
"""
import threading
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import Mock

from fxrate.adapters.persistence.rate_cache import RateCacheStore
from fxrate.domain.models import DailyRateSnapshot, RateCacheEntry


def snap(day: int, usd: str = "1.1") -> DailyRateSnapshot:
    return DailyRateSnapshot(date=date(2024, 1, day), base="EUR", rates={"USD": Decimal(usd)})


class TestGetPut:
    def test_missing_key(self, clock):
        store = RateCacheStore(clock=clock)
        assert store.get("latest:EUR") is None

    def test_put_then_get(self, clock):
        store = RateCacheStore(clock=clock)
        entry = RateCacheEntry(base_currency="EUR")
        entry.upsert(snap(1))
        store.put("latest:EUR", entry, ttl=300)

        cached = store.get("latest:EUR")
        assert cached.by_date == {date(2024, 1, 1): snap(1)}
        assert cached.expires_at == clock.now + 300

    def test_expired_entry_is_absent_and_evicted(self, clock):
        hook = Mock()
        store = RateCacheStore(clock=clock, on_event=hook)
        store.put("latest:EUR", RateCacheEntry(base_currency="EUR"), ttl=300)

        clock.advance(300)
        assert store.get("latest:EUR") is None
        assert len(store) == 0
        hook.assert_called_with("latest:EUR", "expired")

    def test_put_overwrites(self, clock):
        store = RateCacheStore(clock=clock)
        first = RateCacheEntry(base_currency="EUR")
        first.upsert(snap(1))
        store.put("latest:EUR", first, ttl=300)
        second = RateCacheEntry(base_currency="EUR")
        second.upsert(snap(2))
        store.put("latest:EUR", second, ttl=300)

        assert set(store.get("latest:EUR").by_date) == {date(2024, 1, 2)}

    def test_returned_entry_is_detached(self, clock):
        store = RateCacheStore(clock=clock)
        store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        cached = store.get("historical:EUR")
        cached.by_date.clear()
        assert len(store.get("historical:EUR").by_date) == 1


class TestMerge:
    def test_merge_creates_entry(self, clock):
        store = RateCacheStore(clock=clock)
        merged = store.merge("historical:EUR", "EUR", [snap(1), snap(2)], ttl=3600)
        assert merged.base_currency == "EUR"
        assert set(merged.by_date) == {date(2024, 1, 1), date(2024, 1, 2)}
        assert merged.expires_at == clock.now + 3600

    def test_merge_refreshes_ttl(self, clock):
        store = RateCacheStore(clock=clock)
        store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        clock.advance(3000)
        store.merge("historical:EUR", "EUR", [snap(2)], ttl=3600)
        clock.advance(3000)

        cached = store.get("historical:EUR")
        assert cached is not None
        assert set(cached.by_date) == {date(2024, 1, 1), date(2024, 1, 2)}

    def test_merge_into_expired_entry_starts_fresh(self, clock):
        store = RateCacheStore(clock=clock)
        store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        clock.advance(3600)
        merged = store.merge("historical:EUR", "EUR", [snap(2)], ttl=3600)
        assert set(merged.by_date) == {date(2024, 1, 2)}

    def test_merge_is_idempotent(self, clock):
        store = RateCacheStore(clock=clock)
        once = store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        twice = store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        assert once.by_date == twice.by_date
        assert once.empty_dates == twice.empty_dates

    def test_last_write_wins_per_date(self, clock):
        store = RateCacheStore(clock=clock)
        store.merge("historical:EUR", "EUR", [snap(1, "1.1")], ttl=3600)
        store.merge("historical:EUR", "EUR", [snap(1, "1.2")], ttl=3600)
        assert store.get("historical:EUR").by_date[date(2024, 1, 1)].rates["USD"] == Decimal("1.2")

    def test_empty_dates_recorded_unless_quoted(self, clock):
        store = RateCacheStore(clock=clock)
        store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600,
                    empty_dates=[date(2024, 1, 1), date(2024, 1, 6)])
        cached = store.get("historical:EUR")
        assert cached.empty_dates == {date(2024, 1, 6)}
        assert cached.covered_dates() == {date(2024, 1, 1), date(2024, 1, 6)}

    def test_concurrent_merges_keep_every_date(self, clock):
        store = RateCacheStore(clock=clock)
        start = date(2024, 1, 1)

        def worker(offset):
            days = [start + timedelta(days=offset * 10 + i) for i in range(10)]
            for day in days:
                store.merge("historical:EUR", "EUR",
                            [DailyRateSnapshot(date=day, base="EUR", rates={"USD": Decimal("1")})],
                            ttl=3600)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.get("historical:EUR").by_date) == 80


class TestEventsAndEviction:
    def test_hook_failure_is_swallowed(self, clock):
        store = RateCacheStore(clock=clock, on_event=Mock(side_effect=RuntimeError("hook")))
        merged = store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        assert len(merged.by_date) == 1

    def test_merge_notifies(self, clock):
        hook = Mock()
        store = RateCacheStore(clock=clock, on_event=hook)
        store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        hook.assert_called_once_with("historical:EUR", "merged")

    def test_evict_and_keys(self, clock):
        store = RateCacheStore(clock=clock)
        store.merge("historical:EUR", "EUR", [snap(1)], ttl=3600)
        store.merge("historical:USD", "USD", [], ttl=10)
        assert store.keys() == ["historical:EUR", "historical:USD"]
        clock.advance(10)
        assert store.keys() == ["historical:EUR"]
        assert store.evict("historical:EUR") is True
        assert store.evict("historical:EUR") is False
