"""Durable JSON registry of tracked vaults."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .config import AlertChannels, MonitorConfig, TrackedVault
from .errors import DuplicateVaultError, StoreError
from .logger import get_logger
from .settings import MonitorSettings

logger = get_logger(__name__)


def default_monitor_config(settings: MonitorSettings) -> MonitorConfig:
    """Build the config used when no registry file exists yet."""
    return MonitorConfig(
        rpc_url=settings.rpc_url,
        vaults=[],
        alert_channels=AlertChannels(
            console=settings.console_alerts,
            telegram=settings.telegram_chat_id,
        ),
    )


def find_tracked_vault(config: MonitorConfig, address: str) -> TrackedVault | None:
    return next((v for v in config.vaults if v.matches(address)), None)


def add_tracked_vault(config: MonitorConfig, vault: TrackedVault) -> MonitorConfig:
    """Return a copy of ``config`` with ``vault`` appended.

    Raises:
        DuplicateVaultError: If the address is already tracked (case-insensitive)
    """
    if find_tracked_vault(config, vault.address) is not None:
        raise DuplicateVaultError(vault.address)
    return config.model_copy(update={"vaults": [*config.vaults, vault]})


def remove_tracked_vault(config: MonitorConfig, address: str) -> MonitorConfig:
    """Return a copy of ``config`` without ``address``; a no-op when untracked."""
    remaining = [v for v in config.vaults if not v.matches(address)]
    return config.model_copy(update={"vaults": remaining})


class VaultRegistryStore:
    """Reads and writes the whole monitor config as one JSON document."""

    def __init__(self, path: Path, settings: MonitorSettings):
        self.path = Path(path).expanduser()
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: MonitorSettings) -> "VaultRegistryStore":
        return cls(settings.config_path, settings)

    def load(self) -> MonitorConfig:
        """Load the registry, falling back to defaults when absent or unreadable."""
        if not self.path.exists():
            logger.debug("No config at %s, using defaults", self.path)
            return default_monitor_config(self.settings)

        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            return MonitorConfig.model_validate(raw)
        except (
            OSError,
            UnicodeDecodeError,
            json.JSONDecodeError,
            ValidationError,
        ) as e:
            logger.warning(
                "Could not read config %s (%s); using defaults", self.path, e
            )
            return default_monitor_config(self.settings)

    def save(self, config: MonitorConfig) -> None:
        """Write the registry atomically (temp file + rename).

        Raises:
            StoreError: If the directory or file cannot be written
        """
        document = json.dumps(config.to_document(), indent=2)
        tmp_path: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StoreError(f"Failed to write config {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.debug("Saved %d vault(s) to %s", len(config.vaults), self.path)
