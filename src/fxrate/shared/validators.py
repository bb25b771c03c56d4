# src/fxrate/shared/validators.py
"""
Input Validation Utilities - Configuration and User Input Validation

This module provides validation and parsing helpers for settings values
and for arguments typed by bot users: bot tokens, usernames, currency
codes, ISO dates, positive integers and decimal amounts.

Files that USE this module:
- fxrate.config.settings (uses validation functions in Settings field validators)
- fxrate.application.rates_service (normalize_currency_code)
- fxrate.adapters.telegram.handlers (parses command arguments)

Files that this module USES:
- fxrate.domain.errors (ValidationError for rejected user input)
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation

from fxrate.domain.errors import ValidationError

_CURRENCY_RE = re.compile(r'^[A-Za-z]{3}$')


def validate_bot_token(token: str) -> bool:
    """
    Validate Telegram bot token format.

    Args:
        token: Bot token to validate

    Returns:
        True if valid, False otherwise
    """
    if not token:
        return False

    # Bot tokens should be in format: 123456789:ABCDEFghijklmnopQRSTUVwxyz
    pattern = r'^\d{8,10}:[A-Za-z0-9_-]{35}$'
    return bool(re.match(pattern, token))


def validate_username(username: str) -> bool:
    """
    Validate Telegram username format.

    Args:
        username: Username to validate

    Returns:
        True if valid, False otherwise
    """
    if not username:
        return False

    # Remove @ if present
    clean_username = username.lstrip('@')

    # Username should be 5-32 characters, alphanumeric and underscores only
    pattern = r'^[a-zA-Z0-9_]{5,32}$'
    return bool(re.match(pattern, clean_username))


def validate_currency_code(code: str) -> bool:
    """Return True if code looks like an ISO 4217 alphabetic code."""
    return bool(code) and bool(_CURRENCY_RE.match(code))


def normalize_currency_code(code: str) -> str:
    """
    Upper-case and validate a currency code.

    Raises:
        ValidationError: If code is not three ASCII letters
    """
    code = (code or "").strip()
    if not validate_currency_code(code):
        raise ValidationError(f"Invalid currency code: {code!r}")
    return code.upper()


def parse_iso_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        ValidationError: If value is not a valid ISO calendar date
    """
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def validate_positive_int(value: str, name: str) -> int:
    """
    Parse value as an integer >= 1.

    Raises:
        ValidationError: If value is not a positive integer
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a whole number, got {value!r}")
    if number < 1:
        raise ValidationError(f"{name} must be at least 1, got {number}")
    return number


def parse_amount(value: str) -> Decimal:
    """
    Parse a non-negative decimal amount (commas are ignored).

    Raises:
        ValidationError: If value is not a finite, non-negative number
    """
    try:
        amount = Decimal(str(value).replace(",", ""))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"Amount must be a non-negative number, got {value!r}")
    return amount
