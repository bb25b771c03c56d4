"""
Telegram Adapters - Bot Interface

This package contains Telegram bot adapters:
- Bot application builder
- Command handlers
"""

from fxrate.adapters.telegram.bot import build_application
from fxrate.adapters.telegram.handlers import SERVICE_KEY, build_handlers

__all__ = [
    "build_application",
    "build_handlers",
    "SERVICE_KEY",
]
