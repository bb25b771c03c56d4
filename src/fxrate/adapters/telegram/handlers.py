# src/fxrate/adapters/telegram/handlers.py
"""
Telegram Handlers - Command Processing and User Interaction

This module contains all Telegram bot command handlers. It handles user
commands (/start, /latest, /history), the admin-only /convert and /status
commands, applies request defaults, and maps domain errors to replies.

Core calls block on network I/O and backoff sleeps, so they run in worker
threads via asyncio.to_thread. The orchestrator is looked up in
context.bot_data under SERVICE_KEY (set by fxrate.app).

Files that USE this module:
- fxrate.app (build_handlers function creates handler instances)

Files that this module USES:
- fxrate.application.rates_service (HistoricalRateOrchestrator)
- fxrate.adapters.formatting.formatter (all formatter functions)
- fxrate.shared.validators (argument parsing)
- fxrate.config (settings for admin username and request defaults)
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, List, Sequence, Tuple

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from fxrate.adapters.formatting.formatter import (
    format_conversion,
    format_error,
    format_history_page,
    format_latest,
    format_status,
)
from fxrate.application.rates_service import HistoricalRateOrchestrator
from fxrate.domain.errors import DomainError, ValidationError
from fxrate.shared.validators import (
    normalize_currency_code,
    parse_amount,
    parse_iso_date,
    validate_positive_int,
)

from fxrate.config import settings

SERVICE_KEY = "rates_service"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryRequest:
    base_currency: str
    start_date: date
    end_date: date
    page: int
    page_size: int


@dataclass(frozen=True)
class ConvertRequest:
    from_currency: str
    to_currency: str
    amount: Decimal


def parse_history_args(
    args: Sequence[str],
    today: date,
    default_base: str = "EUR",
    default_days: int = 30,
    default_page_size: int = 10,
) -> HistoryRequest:
    """
    Parse '/history [BASE] [START] [END] [PAGE] [PAGE_SIZE]'.

    Missing arguments default to base=default_base, start=today-default_days,
    end=today, page=1, page_size=default_page_size.

    Raises:
        ValidationError: If an argument is malformed or there are too many
    """
    if len(args) > 5:
        raise ValidationError("usage: /history [BASE] [START] [END] [PAGE] [PAGE_SIZE]")
    base = normalize_currency_code(args[0]) if len(args) > 0 else default_base
    start = parse_iso_date(args[1]) if len(args) > 1 else today - timedelta(days=default_days)
    end = parse_iso_date(args[2]) if len(args) > 2 else today
    page = validate_positive_int(args[3], "page") if len(args) > 3 else 1
    page_size = validate_positive_int(args[4], "page size") if len(args) > 4 else default_page_size
    return HistoryRequest(base, start, end, page, page_size)


def parse_latest_args(args: Sequence[str], default_base: str = "EUR") -> Tuple[str, List[str]]:
    """
    Parse '/latest [BASE] [SYMBOL ...]'.

    Symbols may be separated by spaces or commas; none means all currencies.

    Raises:
        ValidationError: If the base or a symbol is not a currency code
    """
    base = normalize_currency_code(args[0]) if args else default_base
    symbols = [
        normalize_currency_code(code)
        for arg in args[1:]
        for code in arg.split(",")
        if code.strip()
    ]
    return base, symbols


def parse_convert_args(args: Sequence[str]) -> ConvertRequest:
    """
    Parse '/convert FROM TO AMOUNT'.

    Raises:
        ValidationError: If the argument count or any argument is invalid
    """
    if len(args) != 3:
        raise ValidationError("usage: /convert FROM TO AMOUNT")
    return ConvertRequest(
        from_currency=normalize_currency_code(args[0]),
        to_currency=normalize_currency_code(args[1]),
        amount=parse_amount(args[2]),
    )


def _service(context: ContextTypes.DEFAULT_TYPE) -> HistoricalRateOrchestrator:
    return context.bot_data[SERVICE_KEY]


def _is_admin(update: Update) -> bool:
    """
    Check if the user sending the update is an admin.

    Returns:
        True if user is admin (username matches ADMIN_USERNAME), False otherwise
    """
    user = update.effective_user
    if user is None:
        return False
    uname = (user.username or "").lstrip("@")
    return uname.lower() == settings.admin_username.lstrip("@").lower()


def _client_id(update: Update) -> str:
    user = update.effective_user
    return str(user.id) if user is not None else "anonymous"


async def _run(update: Update, action: str, call: Callable[[], str]) -> None:
    """
    Run a blocking core call in a worker thread and reply with its text.

    Every command is logged when it starts and when it completes, with the
    caller's Telegram id, the outcome status and the elapsed milliseconds.
    Domain errors become user-facing messages chosen by error kind;
    anything else is logged and reported generically.
    """
    client_id = _client_id(update)
    logger.info("Request started: %s from %s (update %s)", action, client_id, update.update_id)
    started = time.perf_counter()
    status_code = 200
    try:
        text = await asyncio.to_thread(call)
    except DomainError as e:
        status_code = e.status_code
        level = logging.WARNING if e.status_code < 500 else logging.ERROR
        logger.log(level, "%s failed (%s, status=%d): %s", action, e.kind.value, e.status_code, e)
        text = format_error(e)
    except Exception:
        status_code = 500
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.exception(
            "Request failed: %s from %s - %.0fms (update %s)",
            action, client_id, elapsed_ms, update.update_id,
        )
        text = f"⚠️ An error occurred while processing {action}."
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "Request completed: %s from %s - status %d - %.0fms (update %s)",
        action, client_id, status_code, elapsed_ms, update.update_id,
    )
    await update.message.reply_text(text)


# --- /start: Help text ---
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - show available commands."""
    await update.message.reply_text(
        "💱 FX rates bot\n\n"
        "/latest [BASE] [SYMBOL ...] — latest rates, e.g. /latest EUR USD,GBP\n"
        "/history [BASE] [START] [END] [PAGE] [PAGE_SIZE] — daily rates (dates as YYYY-MM-DD)\n"
        "/convert FROM TO AMOUNT — convert an amount (admin only)\n"
        "/status — provider and cache status (admin only)"
    )


# --- /latest: Latest rates ---
async def latest(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /latest [BASE] [SYMBOL ...] - latest rates, optionally only the listed currencies."""
    service = _service(context)

    def call() -> str:
        base, symbols = parse_latest_args(context.args or [], settings.default_base_currency)
        return format_latest(service.get_latest_rates(base), symbols)

    await _run(update, "latest rates", call)


# --- /convert: Currency conversion (admin only) ---
async def convert(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /convert FROM TO AMOUNT - convert at the latest rate (admin only)."""
    if not _is_admin(update):
        await update.message.reply_text("⚠️ This command is only available to the admin.")
        return

    service = _service(context)

    def call() -> str:
        request = parse_convert_args(context.args or [])
        return format_conversion(
            service.convert_currency(request.from_currency, request.to_currency, request.amount)
        )

    await _run(update, "currency conversion", call)


# --- /history: Paginated historical rates ---
async def history(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /history - one page of daily rates, defaults to the last 30 days."""
    service = _service(context)

    def call() -> str:
        request = parse_history_args(
            context.args or [],
            today=date.today(),
            default_base=settings.default_base_currency,
            default_days=settings.history_default_days,
            default_page_size=settings.history_default_page_size,
        )
        page = service.get_historical_rates(
            request.base_currency,
            request.start_date,
            request.end_date,
            request.page,
            request.page_size,
        )
        return format_history_page(page)

    await _run(update, "historical rates", call)


# --- /status: Breaker and cache status (admin only) ---
async def status(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status command - report circuit breaker states and cache keys (admin only)."""
    if not _is_admin(update):
        await update.message.reply_text("⚠️ This command is only available to the admin.")
        return
    service = _service(context)
    await _run(
        update,
        "status",
        lambda: format_status(service.fetcher.breaker_states(), service.store.keys()),
    )


def build_handlers():
    """
    Build and return list of Telegram bot handlers.

    Returns:
        List of handler instances for registration with bot
    """
    return [
        CommandHandler("start", start),
        CommandHandler("latest", latest),
        CommandHandler("history", history),
        CommandHandler("convert", convert),  # Admin only
        CommandHandler("status", status),  # Admin only
    ]
