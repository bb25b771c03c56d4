"""
Persistence Adapters - Data Storage

This package contains adapters for storing data:
- In-memory TTL cache for rate entries
"""

from fxrate.adapters.persistence.rate_cache import RateCacheStore, log_cache_event

__all__ = [
    "RateCacheStore",
    "log_cache_event",
]
