from __future__ import annotations

from ...settings import MonitorSettings
from .base import BaseNotifier
from .logging_notifier import LoggingNotifier
from .telegram import TelegramNotifier


def build_notifier(settings: MonitorSettings, chat_id: str | None) -> BaseNotifier | None:
    """Pick the chat notifier for the configured channel.

    Returns:
        None when no chat channel is configured, a LoggingNotifier when only
        the chat id is known, otherwise a TelegramNotifier
    """
    if not chat_id:
        return None
    token = settings.telegram_bot_token_value
    if not token:
        return LoggingNotifier(chat_id)
    return TelegramNotifier(
        bot_token=token,
        chat_id=chat_id,
        timeout=settings.fetch_timeout_seconds,
        max_tries=settings.request_max_tries,
    )


__all__ = [
    "BaseNotifier",
    "LoggingNotifier",
    "TelegramNotifier",
    "build_notifier",
]
