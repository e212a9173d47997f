"""Shared dependencies handed to the monitor."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import MonitorSettings


@dataclass
class AppState:
    """Resolved settings plus the application logger.

    Built once by the CLI; tests construct it directly with their own settings.
    """

    settings: MonitorSettings
    logger: logging.Logger
