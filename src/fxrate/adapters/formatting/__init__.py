"""
Formatting Adapters - Message Formatting

This package contains message formatting adapters for Telegram output.
"""

from fxrate.adapters.formatting.formatter import (
    format_conversion,
    format_error,
    format_history_page,
    format_latest,
    format_status,
)

__all__ = [
    "format_latest",
    "format_conversion",
    "format_history_page",
    "format_status",
    "format_error",
]
