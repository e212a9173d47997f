"""Settings module with configuration precedence: CLI > ENV > .env > defaults."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .chains import get_chain
from .constants import (
    ALERT_LOG_FILENAME,
    DEFAULT_AUTO_ADD_THRESHOLD,
    DEFAULT_CHAIN,
    DEFAULT_ETHEREUM_RPC_URL,
    DEFAULT_POSITIONS_PAGE_SIZE,
    MORPHO_API_URL,
)

load_dotenv()


def default_config_path() -> Path:
    return Path.home() / ".config" / "morpho-monitor" / "config.json"


class MonitorSettings(BaseSettings):
    """Single source of truth for runtime configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with MORPHO_MONITOR_, plus the legacy
      ETH_RPC_URL / TELEGRAM_* variables)

    The tracked vault registry itself lives in the JSON file at
    ``config_path``; these settings only seed its defaults.
    """

    # --- storage ---
    config_path: Path = Field(default_factory=default_config_path)

    # --- endpoints ---
    rpc_url: str = Field(
        default=DEFAULT_ETHEREUM_RPC_URL,
        validation_alias=AliasChoices("MORPHO_MONITOR_RPC_URL", "ETH_RPC_URL"),
    )
    morpho_api_url: str = MORPHO_API_URL

    # --- alert channels ---
    console_alerts: bool = True
    telegram_chat_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "MORPHO_MONITOR_TELEGRAM_CHAT_ID", "TELEGRAM_CHAT_ID"
        ),
    )
    telegram_bot_token: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "MORPHO_MONITOR_TELEGRAM_BOT_TOKEN", "TELEGRAM_BOT_TOKEN"
        ),
    )

    # --- fetching ---
    fetch_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Upper bound for a single vault fetch or index query.",
    )
    request_max_tries: int = Field(default=3, ge=1)
    positions_page_size: int = Field(default=DEFAULT_POSITIONS_PAGE_SIZE, gt=0)

    # --- discovery ---
    default_auto_add_threshold: Decimal = Field(
        default=DEFAULT_AUTO_ADD_THRESHOLD, gt=0
    )

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="MORPHO_MONITOR_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("telegram_bot_token", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        if not v:
            return None
        return SecretStr(v)

    @field_validator("telegram_chat_id", mode="before")
    @classmethod
    def blank_chat_id_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the settings as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.telegram_bot_token:
            data["telegram_bot_token"] = "***redacted***"
        return data

    @property
    def alert_log_path(self) -> Path:
        """Alert log lives next to the registry file."""
        return self.config_path.parent / ALERT_LOG_FILENAME

    @property
    def telegram_bot_token_value(self) -> str | None:
        if self.telegram_bot_token is None:
            return None
        return self.telegram_bot_token.get_secret_value()

    def rpc_url_for(self, chain: str, config_rpc_url: str | None = None) -> str:
        """Resolve the RPC endpoint used to read vaults on ``chain``.

        The registry's ``rpcUrl`` applies to the default chain; every other
        chain uses its table endpoint.

        Raises:
            UnknownChainError: If ``chain`` is not supported
        """
        resolved = get_chain(chain)
        if resolved.key == DEFAULT_CHAIN:
            return config_rpc_url or self.rpc_url
        return resolved.rpc_url
