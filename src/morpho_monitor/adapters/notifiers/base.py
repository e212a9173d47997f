from __future__ import annotations

from abc import ABC, abstractmethod


class BaseNotifier(ABC):
    """Delivers a rendered alert message to a chat channel."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this channel."""
        pass

    @abstractmethod
    async def notify(self, message: str) -> None:
        """Deliver ``message``; raise on failure."""
        pass
