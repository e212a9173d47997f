from __future__ import annotations

from .data_sources import (
    BasePositionIndex,
    BaseVaultDataSource,
    MorphoApiPositionIndex,
    Web3VaultDataSource,
)
from .notifiers import BaseNotifier, LoggingNotifier, TelegramNotifier, build_notifier

__all__ = [
    "BaseNotifier",
    "BasePositionIndex",
    "BaseVaultDataSource",
    "LoggingNotifier",
    "MorphoApiPositionIndex",
    "TelegramNotifier",
    "Web3VaultDataSource",
    "build_notifier",
]
