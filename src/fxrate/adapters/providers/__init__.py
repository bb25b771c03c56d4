"""
Upstream Providers - External Rate Sources

This package contains the upstream provider interface and the
Frankfurter API implementation.
"""

from fxrate.adapters.providers.base import UpstreamError, UpstreamRateProvider
from fxrate.adapters.providers.frankfurter import FrankfurterProvider

__all__ = [
    "UpstreamRateProvider",
    "UpstreamError",
    "FrankfurterProvider",
]
