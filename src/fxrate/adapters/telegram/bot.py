# src/fxrate/adapters/telegram/bot.py
"""
Telegram Bot - Application Builder

This module builds the Telegram application, stores the rates service in
bot_data and registers the command handlers.
"""

from __future__ import annotations

from telegram.ext import Application

from fxrate.adapters.telegram.handlers import SERVICE_KEY, build_handlers
from fxrate.application.rates_service import HistoricalRateOrchestrator


def build_application(bot_token: str, service: HistoricalRateOrchestrator) -> Application:
    """
    Build Telegram bot application wired to the rates service.

    Args:
        bot_token: Telegram bot token
        service: Orchestrator used by all command handlers

    Returns:
        Configured Application instance
    """
    app = Application.builder().token(bot_token).concurrent_updates(True).build()
    app.bot_data[SERVICE_KEY] = service
    for handler in build_handlers():
        app.add_handler(handler)
    return app
