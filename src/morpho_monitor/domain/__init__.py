"""Domain models for vault monitoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from ..config import AlertChannels, TrackedVault


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VaultState:
    """Raw vault state as read from the chain."""

    address: str
    chain: str
    name: str
    symbol: str
    asset_address: str
    asset_symbol: str
    asset_decimals: int
    total_assets_raw: int  # asset base units
    total_supply_raw: int  # 18-decimal share units
    fetched_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class DerivedMetrics:
    liquidity: Decimal
    shares: Decimal
    # shares / liquidity * 100; not a borrow utilization despite the name
    utilization_rate: Decimal


@dataclass(frozen=True)
class VaultInfo:
    """Vault state merged with its derived metrics."""

    address: str
    chain: str
    name: str
    symbol: str
    asset: str
    asset_symbol: str
    asset_decimals: int
    liquidity: Decimal
    shares: Decimal
    utilization_rate: Decimal
    fetched_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "chain": self.chain,
            "name": self.name,
            "symbol": self.symbol,
            "asset": self.asset,
            "assetSymbol": self.asset_symbol,
            "assetDecimals": self.asset_decimals,
            "liquidity": str(self.liquidity),
            "shares": str(self.shares),
            "utilizationRate": str(self.utilization_rate),
            "timestamp": self.fetched_at.isoformat(),
        }


@dataclass(frozen=True)
class CheckResult:
    """Outcome of comparing one tracked vault against its threshold."""

    vault: TrackedVault
    info: VaultInfo
    threshold: Decimal
    below_threshold: bool
    percent_of_threshold: Decimal

    @property
    def liquidity(self) -> Decimal:
        return self.info.liquidity

    @property
    def address(self) -> str:
        return self.vault.address


@dataclass(frozen=True)
class PositionData:
    """A single account position returned by the position index."""

    chain_id: int
    vault_address: str
    vault_name: str
    vault_symbol: str
    asset_address: str
    asset_symbol: str
    asset_decimals: int
    total_assets_raw: int
    total_supply_raw: int
    user_shares_raw: int


@dataclass(frozen=True)
class DiscoveredVault:
    chain: str
    address: str
    name: str
    symbol: str
    asset_symbol: str
    asset_decimals: int
    user_shares: Decimal
    user_assets_value: Decimal
    liquidity: Decimal


@dataclass(frozen=True)
class FetchFailure:
    """A per-vault or per-chain failure recorded during a batch operation."""

    target: str
    chain: str
    error: str


@dataclass
class CheckOutcome:
    results: list[CheckResult] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)

    @property
    def breaches(self) -> list[CheckResult]:
        return [r for r in self.results if r.below_threshold]


@dataclass
class DiscoveryOutcome:
    vaults: list[DiscoveredVault] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)
    skipped_chains: list[str] = field(default_factory=list)


@dataclass
class AutoAddOutcome:
    """Result of auto-adding discovered vaults.

    ``discovered`` is everything discovery returned; ``added`` and
    ``skipped`` partition it by whether a registry entry was created.
    """

    discovered: list[DiscoveredVault] = field(default_factory=list)
    added: list[TrackedVault] = field(default_factory=list)
    skipped: list[DiscoveredVault] = field(default_factory=list)
    failures: list[FetchFailure] = field(default_factory=list)


@dataclass(frozen=True)
class MonitorStatus:
    vaults: list[TrackedVault]
    alert_channels: AlertChannels


@dataclass(frozen=True)
class HistoryStub:
    """Placeholder for a future liquidity time series."""

    vault: str
    period: str
    data_points: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "vault": self.vault,
            "period": self.period,
            "dataPoints": list(self.data_points),
        }


@dataclass
class AlertDelivery:
    """Per-channel delivery status for one alert."""

    message: str
    console: bool = False
    chat: bool = False
    logged: bool = False
    errors: list[str] = field(default_factory=list)
