# src/fxrate/adapters/persistence/rate_cache.py
"""
Rate Cache Store - In-Memory TTL Cache for Rate Entries

This module holds RateCacheEntry objects keyed by cache key
(e.g. "latest:EUR" or "historical:EUR") with absolute-TTL expiry.
Expired entries are treated as absent and evicted on read; merges upsert
daily snapshots into an entry and refresh its expiry.

All reads and writes are serialized by one re-entrant lock, and entries
handed out are detached copies, so concurrent merges into the same entry
are linearizable (last write wins per date key).

Files that USE this module:
- fxrate.application.rates_service (HistoricalRateOrchestrator reads/merges entries)
- fxrate.app (composition root creates the shared store)
- tests.test_rate_cache (unit tests)

Files that this module USES:
- fxrate.domain.models (RateCacheEntry, DailyRateSnapshot)
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from fxrate.domain.models import DailyRateSnapshot, RateCacheEntry

log = logging.getLogger(__name__)

CacheEventHook = Callable[[str, str], None]

# Event reasons passed to the observability hook
EXPIRED = "expired"
REPLACED = "replaced"
MERGED = "merged"
REMOVED = "removed"


def log_cache_event(key: str, reason: str) -> None:
    """Default observability hook."""
    if reason in (EXPIRED, REMOVED):
        log.info("Cache entry %s evicted: %s", key, reason)
    else:
        log.debug("Cache entry %s %s", key, reason)


class RateCacheStore:
    """Thread-safe key -> RateCacheEntry store with absolute TTL expiry."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        on_event: Optional[CacheEventHook] = log_cache_event,
    ):
        """
        Args:
            clock: Returns the current time in seconds (monotonic by default)
            on_event: Optional (cache_key, reason) callback, fired outside the lock
        """
        self._clock = clock
        self._on_event = on_event
        self._entries: Dict[str, RateCacheEntry] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _notify(self, events: List[Tuple[str, str]]) -> None:
        if self._on_event is None:
            return
        for key, reason in events:
            try:
                self._on_event(key, reason)
            except Exception:
                log.exception("Cache event hook failed for %s (%s)", key, reason)

    def _live_entry(self, key: str, now: float, events: List[Tuple[str, str]]) -> Optional[RateCacheEntry]:
        """Return the stored entry for key, evicting it if expired. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now >= entry.expires_at:
            del self._entries[key]
            events.append((key, EXPIRED))
            return None
        return entry

    def get(self, key: str) -> Optional[RateCacheEntry]:
        """
        Get a copy of the entry for key.

        Returns:
            The entry, or None if missing or expired (an expired entry is evicted)
        """
        events: List[Tuple[str, str]] = []
        with self._lock:
            entry = self._live_entry(key, self._clock(), events)
            result = entry.copy() if entry is not None else None
        self._notify(events)
        return result

    def put(self, key: str, entry: RateCacheEntry, ttl: float) -> RateCacheEntry:
        """
        Store entry under key with expires_at = now + ttl, replacing any previous entry.

        Returns:
            A copy of the stored entry
        """
        events: List[Tuple[str, str]] = []
        with self._lock:
            now = self._clock()
            if self._live_entry(key, now, events) is not None:
                events.append((key, REPLACED))
            stored = entry.copy()
            stored.expires_at = now + ttl
            self._entries[key] = stored
            result = stored.copy()
        self._notify(events)
        return result

    def merge(
        self,
        key: str,
        base_currency: str,
        snapshots: Iterable[DailyRateSnapshot],
        ttl: float,
        empty_dates: Iterable[date] = (),
    ) -> RateCacheEntry:
        """
        Upsert snapshots into the entry for key and refresh its expiry.

        A missing or expired entry is replaced by a fresh, empty one first.
        Days in empty_dates are recorded as covered unless a snapshot exists
        for them.

        Returns:
            A copy of the merged entry
        """
        events: List[Tuple[str, str]] = []
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now, events)
            if entry is None:
                entry = RateCacheEntry(base_currency=base_currency)
                self._entries[key] = entry
            for snapshot in snapshots:
                entry.upsert(snapshot)
            for day in empty_dates:
                if day not in entry.by_date:
                    entry.empty_dates.add(day)
            entry.expires_at = now + ttl
            result = entry.copy()
            events.append((key, MERGED))
        self._notify(events)
        return result

    def evict(self, key: str) -> bool:
        """Remove the entry for key. Returns True if one was present."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            self._notify([(key, REMOVED)])
        return removed

    def clear(self) -> None:
        with self._lock:
            keys = list(self._entries)
            self._entries.clear()
        self._notify([(key, REMOVED) for key in keys])

    def keys(self) -> List[str]:
        """Keys of entries that have not expired yet."""
        with self._lock:
            now = self._clock()
            return sorted(k for k, e in self._entries.items() if now < e.expires_at)
