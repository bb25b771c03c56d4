"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation and argument parsing
- Logging configuration
"""

from fxrate.shared.validators import (
    normalize_currency_code,
    parse_amount,
    parse_iso_date,
    validate_bot_token,
    validate_currency_code,
    validate_positive_int,
    validate_username,
)
from fxrate.shared.logging_conf import setup_logging

__all__ = [
    "validate_bot_token",
    "validate_username",
    "validate_currency_code",
    "normalize_currency_code",
    "parse_iso_date",
    "validate_positive_int",
    "parse_amount",
    "setup_logging",
]
