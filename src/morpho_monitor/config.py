"""Persisted monitor configuration: tracked vaults and alert channels."""

from __future__ import annotations

import time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_CHAIN


def now_ms() -> int:
    return int(time.time() * 1000)


class TrackedVault(BaseModel):
    """A vault registered for monitoring.

    Identity is the lower-cased address; the cached name/symbol fields are
    captured when the vault is added and only used for display and alerts.
    """

    address: str
    chain: str = DEFAULT_CHAIN
    threshold: Decimal
    name: str = ""
    symbol: str = ""
    asset_symbol: str = Field(default="", alias="assetSymbol")
    added_at: int = Field(default_factory=now_ms, alias="addedAt")
    auto_discovered: bool = Field(default=False, alias="autoDiscovered")
    user_shares: Decimal | None = Field(default=None, alias="userShares")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def key(self) -> str:
        return self.address.lower()

    def matches(self, address: str) -> bool:
        return self.key == address.lower()


class AlertChannels(BaseModel):
    console: bool = True
    telegram: str | None = None

    model_config = ConfigDict(extra="ignore")


class MonitorConfig(BaseModel):
    """The whole registry document, always read and written as one unit."""

    rpc_url: str = Field(alias="rpcUrl")
    vaults: list[TrackedVault] = Field(default_factory=list)
    alert_channels: AlertChannels = Field(
        default_factory=AlertChannels, alias="alertChannels"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_document(self) -> dict[str, object]:
        """Serialize to the on-disk JSON layout (camelCase keys, decimals as strings)."""
        return self.model_dump(mode="json", by_alias=True)
