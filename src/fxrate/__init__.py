# src/fxrate/__init__.py
"""
FXRate - Currency Exchange Rate Service

Serves latest rates, currency conversion and paginated historical rates
from an upstream provider, with a historical cache that fetches only the
missing days through a retry + circuit breaker layer. Exposed through a
Telegram bot.
"""

__version__ = "1.0.0"
