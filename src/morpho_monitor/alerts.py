"""Alert rendering and delivery for vaults below their threshold."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

from .adapters.notifiers import BaseNotifier, build_notifier
from .config import AlertChannels, TrackedVault
from .domain import AlertDelivery, VaultInfo
from .logger import get_logger
from .settings import MonitorSettings

logger = get_logger(__name__)


def render_alert_message(vault: TrackedVault, info: VaultInfo) -> str:
    """Render the human-readable alert body for a breaching vault."""
    asset = vault.asset_symbol or info.asset_symbol
    name = vault.name or info.name
    symbol = vault.symbol or info.symbol
    deficit = vault.threshold - info.liquidity
    return (
        "⚠️ Morpho Vault Liquidity Alert\n\n"
        f"Vault: {name} ({symbol})\n"
        f"Current Liquidity: {info.liquidity:.2f} {asset}\n"
        f"Threshold: {vault.threshold:.2f} {asset}\n"
        f"Deficit: {deficit:.2f} {asset}\n\n"
        f"Address: {vault.address}"
    )


class BaseAlertSink(ABC):
    @abstractmethod
    async def send(self, vault: TrackedVault, info: VaultInfo) -> AlertDelivery:
        """Deliver an alert for ``vault``; never raises for channel failures."""
        pass


class AlertSink(BaseAlertSink):
    """Fans an alert out to the console, a chat notifier and the alert log.

    Each channel is attempted independently; the log append runs last so
    it records the alert even when chat delivery failed.
    """

    def __init__(
        self,
        channels: AlertChannels,
        log_path: Path,
        notifier: BaseNotifier | None = None,
        console: Console | None = None,
    ):
        self.channels = channels
        self.log_path = Path(log_path)
        self.notifier = notifier
        self.console = console or Console()

    @classmethod
    def from_settings(
        cls, settings: MonitorSettings, channels: AlertChannels
    ) -> "AlertSink":
        return cls(
            channels=channels,
            log_path=settings.alert_log_path,
            notifier=build_notifier(settings, channels.telegram),
        )

    def _append_log(self, message: str) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(f"{timestamp} - {message}\n\n")

    async def send(self, vault: TrackedVault, info: VaultInfo) -> AlertDelivery:
        message = render_alert_message(vault, info)
        delivery = AlertDelivery(message=message)

        if self.channels.console:
            try:
                self.console.print(f"\n{message}\n", markup=False, highlight=False)
                delivery.console = True
            except OSError as e:
                logger.error("Failed to print alert for %s: %s", vault.address, e)
                delivery.errors.append(f"console: {e}")

        if self.notifier is not None:
            try:
                await self.notifier.notify(message)
                delivery.chat = True
            except Exception as e:
                logger.error(
                    "Failed to deliver %s alert for %s: %s",
                    self.notifier.name,
                    vault.address,
                    e,
                )
                delivery.errors.append(f"{self.notifier.name}: {e}")

        try:
            await asyncio.to_thread(self._append_log, message)
            delivery.logged = True
        except OSError as e:
            logger.error("Failed to append alert log %s: %s", self.log_path, e)
            delivery.errors.append(f"alert log: {e}")

        return delivery
