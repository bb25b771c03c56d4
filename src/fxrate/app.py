# src/fxrate/app.py
"""
Application Entry Point - Service Wiring and Bot Startup

This module serves as the composition root for FXRate.
It wires the upstream provider, resilience policies, cache store and
orchestrator, then starts the Telegram bot.

Files that USE this module:
- python -m fxrate (module entry point via fxrate.__main__)
- fxrate console script

Files that this module USES:
- fxrate.shared.logging_conf (setup_logging for logging configuration)
- fxrate.config (settings for configuration management)
- fxrate.adapters.providers.frankfurter (FrankfurterProvider upstream client)
- fxrate.application.resilience (RetryPolicy, CircuitBreaker, ResilientFetcher)
- fxrate.adapters.persistence.rate_cache (RateCacheStore)
- fxrate.application.rates_service (HistoricalRateOrchestrator)
- fxrate.adapters.telegram.bot (build_application)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations for forward references

import logging  # Standard library for logging messages and errors
import sys  # System-specific parameters and functions for exit codes
from typing import Optional

from telegram.error import NetworkError, TimedOut  # Telegram API error exceptions

from fxrate.adapters.persistence.rate_cache import RateCacheStore  # Shared in-memory TTL cache
from fxrate.adapters.providers.base import UpstreamRateProvider  # Upstream provider interface
from fxrate.adapters.providers.frankfurter import FrankfurterProvider  # Frankfurter API client
from fxrate.adapters.telegram.bot import build_application  # Telegram application factory
from fxrate.application.rates_service import HistoricalRateOrchestrator  # Business logic for exchange rates
from fxrate.application.resilience import CircuitBreaker, ResilientFetcher, RetryPolicy
from fxrate.config.settings import Settings, settings  # Application configuration
from fxrate.shared.logging_conf import setup_logging  # Configure logging with file rotation


def build_service(
    config: Settings, provider: Optional[UpstreamRateProvider] = None
) -> HistoricalRateOrchestrator:
    """
    Wire the rates service from settings.

    The latest and historical endpoints each get their own circuit breaker;
    the cache store and breakers live as long as the returned service.

    Args:
        config: Application settings
        provider: Optional upstream provider (defaults to FrankfurterProvider)

    Returns:
        Ready-to-use HistoricalRateOrchestrator
    """
    provider = provider or FrankfurterProvider(
        base_url=config.upstream_base_url,
        timeout=config.http_timeout_seconds,
        retry_client_errors=config.upstream_retry_client_errors,
    )
    retry_policy = RetryPolicy(
        retries=config.retry_attempts,
        backoff_seconds=config.retry_backoff_seconds,
    )
    fetcher = ResilientFetcher(
        provider,
        retry_policy=retry_policy,
        latest_breaker=CircuitBreaker(
            "latest",
            failure_threshold=config.breaker_failure_threshold,
            break_seconds=config.breaker_break_seconds,
        ),
        historical_breaker=CircuitBreaker(
            "historical",
            failure_threshold=config.breaker_failure_threshold,
            break_seconds=config.breaker_break_seconds,
        ),
    )
    return HistoricalRateOrchestrator(
        fetcher=fetcher,
        store=RateCacheStore(),
        latest_ttl=config.latest_ttl_seconds,
        historical_ttl=config.historical_ttl_seconds,
        restricted_currencies=config.restricted_currency_set,
    )


def main() -> None:
    """
    Initialize and start the Telegram bot application.

    This function:
    1. Sets up logging and validates configuration
    2. Builds the rates service
    3. Creates the Telegram application and registers command handlers
    4. Starts the bot polling loop
    """
    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        log_stdout=settings.log_stdout,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logger = logging.getLogger(__name__)

    if not settings.bot_token:
        logger.error("BOT_TOKEN missing; set it in the environment or .env")
        sys.exit(1)

    service = build_service(settings)
    app = build_application(settings.bot_token, service)

    logger.info(
        "Starting bot polling… upstream=%s latest ttl=%dm historical ttl=%dm "
        "retries=%d breaker threshold=%d break=%.0fs",
        settings.upstream_base_url,
        settings.latest_cache_minutes,
        settings.historical_cache_minutes,
        settings.retry_attempts,
        settings.breaker_failure_threshold,
        settings.breaker_break_seconds,
    )

    try:
        app.run_polling(drop_pending_updates=False)
    except (TimedOut, NetworkError) as e:
        logger.error(
            "Network error during bot operation (timeout connecting to Telegram API): %s (type: %s)",
            e,
            type(e).__name__,
            exc_info=True,
        )
        raise
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (KeyboardInterrupt)")
        raise
    except Exception as e:
        logger.exception("Unexpected error during bot operation: %s (type: %s)", e, type(e).__name__)
        raise


if __name__ == "__main__":
    main()
