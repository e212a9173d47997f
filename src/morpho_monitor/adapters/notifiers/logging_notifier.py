from __future__ import annotations

from ...logger import get_logger
from .base import BaseNotifier

logger = get_logger(__name__)


class LoggingNotifier(BaseNotifier):
    """Stand-in used when a chat id is configured without a bot token."""

    def __init__(self, chat_id: str):
        self.chat_id = chat_id

    @property
    def name(self) -> str:
        return "log"

    async def notify(self, message: str) -> None:
        logger.info(
            "Telegram alert for chat %s would be sent here (no bot token configured)",
            self.chat_id,
        )
        logger.debug("Alert body:\n%s", message)
