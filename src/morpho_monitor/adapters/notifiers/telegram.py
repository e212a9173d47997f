from __future__ import annotations

import asyncio

import backoff
import requests

from ...constants import RETRYABLE_STATUS_CODES
from ...logger import get_logger
from .base import BaseNotifier

logger = get_logger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
MAX_MESSAGE_LENGTH = 4000


def _is_permanent_http_error(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


class TelegramNotifier(BaseNotifier):
    """Sends alerts through the Telegram Bot API ``sendMessage`` method."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        timeout: float = 10.0,
        max_tries: int = 3,
        api_url: str = TELEGRAM_API_URL,
    ):
        if not bot_token:
            raise ValueError("bot_token is required for Telegram alerts")
        if not chat_id:
            raise ValueError("chat_id is required for Telegram alerts")
        self._bot_token = bot_token
        self.chat_id = chat_id
        self.timeout = timeout
        self.max_tries = max_tries
        self.api_url = api_url.rstrip("/")

    @property
    def name(self) -> str:
        return "telegram"

    def _truncate(self, text: str) -> str:
        if len(text) <= MAX_MESSAGE_LENGTH:
            return text
        return text[: MAX_MESSAGE_LENGTH - 3] + "..."

    async def notify(self, message: str) -> None:
        url = f"{self.api_url}/bot{self._bot_token}/sendMessage"
        payload = {"chat_id": self.chat_id, "text": self._truncate(message)}

        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=_is_permanent_http_error,
            jitter=backoff.full_jitter,
        )
        async def _send() -> None:
            response = await asyncio.to_thread(
                requests.post, url, json=payload, timeout=self.timeout
            )
            response.raise_for_status()

        await _send()
        logger.debug("Telegram alert delivered to chat %s", self.chat_id)
