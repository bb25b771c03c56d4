# src/fxrate/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Supports environment variables (and a .env file) with validation.

Files that USE this module:
- fxrate.app (builds the service graph and the bot from settings)
- fxrate.adapters.providers.frankfurter (upstream URL and HTTP timeout)
- fxrate.adapters.telegram.handlers (admin username and request defaults)

Files that this module USES:
- fxrate.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from typing import FrozenSet, Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from fxrate.shared.validators import (
    validate_bot_token,  # Validate Telegram bot token format
    validate_currency_code,  # Validate ISO currency code format
    validate_username,  # Validate Telegram username format
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Telegram ---
    bot_token: str = Field(default="", alias="BOT_TOKEN")
    admin_username: str = Field(default="fxrate_admin", alias="ADMIN_USERNAME")

    # --- Upstream provider ---
    upstream_base_url: str = Field(default="https://api.frankfurter.app", alias="UPSTREAM_BASE_URL")
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    # 4xx responses are not retried unless enabled here
    upstream_retry_client_errors: bool = Field(default=False, alias="UPSTREAM_RETRY_CLIENT_ERRORS")

    # --- Resilience ---
    retry_attempts: int = Field(default=3, alias="RETRY_ATTEMPTS", ge=0, le=10)
    retry_backoff_seconds: float = Field(default=1.0, alias="RETRY_BACKOFF_SECONDS", ge=0.0)
    breaker_failure_threshold: int = Field(default=2, alias="BREAKER_FAILURE_THRESHOLD", ge=1)
    breaker_break_seconds: float = Field(default=30.0, alias="BREAKER_BREAK_SECONDS", gt=0.0)

    # --- Cache Settings (in minutes) ---
    latest_cache_minutes: int = Field(default=5, alias="LATEST_CACHE_MINUTES", ge=1, le=1440)
    historical_cache_minutes: int = Field(default=60, alias="HISTORICAL_CACHE_MINUTES", ge=1, le=1440)

    # --- Currency policy ---
    restricted_currencies: str = Field(default="TRY,PLN,THB,MXN", alias="RESTRICTED_CURRENCIES")
    default_base_currency: str = Field(default="EUR", alias="DEFAULT_BASE_CURRENCY")

    # --- Historical request defaults ---
    history_default_days: int = Field(default=30, alias="HISTORY_DEFAULT_DAYS", ge=0)
    history_default_page_size: int = Field(default=10, alias="HISTORY_DEFAULT_PAGE_SIZE", ge=1, le=100)

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="FXRATE_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @property
    def latest_ttl_seconds(self) -> float:
        return self.latest_cache_minutes * 60.0

    @property
    def historical_ttl_seconds(self) -> float:
        return self.historical_cache_minutes * 60.0

    @property
    def restricted_currency_set(self) -> FrozenSet[str]:
        """Restricted currencies parsed from the comma-separated setting."""
        return frozenset(
            code.strip().upper()
            for code in self.restricted_currencies.split(",")
            if code.strip()
        )

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate bot token format (only when provided)."""
        if v and not validate_bot_token(v):
            raise ValueError("Invalid BOT_TOKEN format")
        return v

    @field_validator("admin_username")
    @classmethod
    def validate_admin_username(cls, v: str) -> str:
        if not validate_username(v):
            raise ValueError("Invalid ADMIN_USERNAME format")
        return v.lstrip("@")

    @field_validator("restricted_currencies")
    @classmethod
    def validate_restricted(cls, v: str) -> str:
        """Every entry must be a three-letter currency code."""
        for code in v.split(","):
            if code.strip() and not validate_currency_code(code.strip()):
                raise ValueError(f"Invalid currency code in RESTRICTED_CURRENCIES: {code!r}")
        return v

    @field_validator("default_base_currency")
    @classmethod
    def validate_default_base(cls, v: str) -> str:
        if not validate_currency_code(v):
            raise ValueError("DEFAULT_BASE_CURRENCY must be a three-letter currency code")
        return v.upper()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level


# Global settings instance
settings = Settings()


# ============================================================================
# Deployment Instructions
# ============================================================================
#
# 1. Put BOT_TOKEN (and optionally ADMIN_USERNAME) in .env
#
# 2. Run the bot in the background:
#    nohup python -m fxrate > bot.log 2>&1 &
#
# 3. Monitor logs in real-time:
#    tail -f bot.log
#
# 4. Stop the bot:
#    pkill -f "python -m fxrate"
#
# ============================================================================
