from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

import pytest

from morpho_monitor.adapters.data_sources.base import (
    BasePositionIndex,
    BaseVaultDataSource,
)
from morpho_monitor.alerts import BaseAlertSink
from morpho_monitor.config import AlertChannels, TrackedVault
from morpho_monitor.domain import AlertDelivery, PositionData, VaultInfo, VaultState
from morpho_monitor.errors import VaultFetchError
from morpho_monitor.monitor import VaultMonitor
from morpho_monitor.settings import MonitorSettings
from morpho_monitor.state import AppState
from morpho_monitor.store import VaultRegistryStore

VAULT_A = "0x" + "a1" * 20
VAULT_B = "0x" + "b2" * 20
VAULT_C = "0x" + "c3" * 20
ACCOUNT = "0x" + "99" * 20


def make_vault_state(
    address: str,
    liquidity: int | str | Decimal,
    chain: str = "ethereum",
    decimals: int = 6,
    shares: int | str | Decimal | None = None,
    name: str = "Test Vault",
) -> VaultState:
    shares = liquidity if shares is None else shares
    return VaultState(
        address=address,
        chain=chain,
        name=name,
        symbol="tvUSDC",
        asset_address="0x" + "0c" * 20,
        asset_symbol="USDC",
        asset_decimals=decimals,
        total_assets_raw=int(Decimal(liquidity) * 10**decimals),
        total_supply_raw=int(Decimal(shares) * 10**18),
    )


def make_position(
    address: str,
    liquidity: int,
    chain_id: int = 1,
    user_shares: int = 10,
    decimals: int = 6,
) -> PositionData:
    return PositionData(
        chain_id=chain_id,
        vault_address=address,
        vault_name=f"Vault {address[-4:]}",
        vault_symbol="mv",
        asset_address="0x" + "0c" * 20,
        asset_symbol="USDC",
        asset_decimals=decimals,
        total_assets_raw=liquidity * 10**decimals,
        total_supply_raw=liquidity * 10**18,
        user_shares_raw=user_shares * 10**18,
    )


def make_tracked(address: str, threshold: int | str, **kwargs) -> TrackedVault:
    return TrackedVault(
        address=address,
        threshold=Decimal(threshold),
        name=kwargs.pop("name", "Test Vault"),
        symbol=kwargs.pop("symbol", "tvUSDC"),
        asset_symbol=kwargs.pop("asset_symbol", "USDC"),
        added_at=kwargs.pop("added_at", 1_700_000_000_000),
        **kwargs,
    )


class FakeVaultDataSource(BaseVaultDataSource):
    """Serves canned states keyed by lower-cased address."""

    def __init__(self, states: dict[str, VaultState | Exception] | None = None):
        self.states = {k.lower(): v for k, v in (states or {}).items()}
        self.calls: list[tuple[str, str, str | None]] = []
        self.delay = 0.0

    @property
    def source_name(self) -> str:
        return "fake"

    async def fetch_vault_state(
        self, address: str, chain: str, rpc_url: str | None = None
    ) -> VaultState:
        self.calls.append((address, chain, rpc_url))
        if self.delay:
            await asyncio.sleep(self.delay)
        state = self.states.get(address.lower())
        if state is None:
            raise VaultFetchError(address, chain, "execution reverted")
        if isinstance(state, Exception):
            raise state
        return state


class FakePositionIndex(BasePositionIndex):
    def __init__(self, by_chain: dict[int, list[PositionData] | Exception] | None = None):
        self.by_chain = by_chain or {}
        self.calls: list[tuple[str, list[int]]] = []

    @property
    def source_name(self) -> str:
        return "fake"

    async def query_positions(
        self, account: str, chain_ids: list[int]
    ) -> list[PositionData]:
        self.calls.append((account, list(chain_ids)))
        result = self.by_chain.get(chain_ids[0], [])
        if isinstance(result, Exception):
            raise result
        return list(result)


class RecordingAlertSink(BaseAlertSink):
    def __init__(self):
        self.sent: list[tuple[TrackedVault, VaultInfo]] = []
        self.channels: list[AlertChannels] = []

    async def send(self, vault: TrackedVault, info: VaultInfo) -> AlertDelivery:
        self.sent.append((vault, info))
        return AlertDelivery(message=f"alert {vault.address}", console=True)


@pytest.fixture
def settings(tmp_path) -> MonitorSettings:
    return MonitorSettings(
        config_path=tmp_path / "morpho-monitor" / "config.json",
        rpc_url="http://localhost:8545",
        telegram_chat_id=None,
        telegram_bot_token=None,
        fetch_timeout_seconds=1.0,
        log_level="DEBUG",
    )


@pytest.fixture
def store(settings) -> VaultRegistryStore:
    return VaultRegistryStore.from_settings(settings)


@pytest.fixture
def data_source() -> FakeVaultDataSource:
    return FakeVaultDataSource()


@pytest.fixture
def position_index() -> FakePositionIndex:
    return FakePositionIndex()


@pytest.fixture
def alert_sink() -> RecordingAlertSink:
    return RecordingAlertSink()


@pytest.fixture
def monitor(settings, store, data_source, position_index, alert_sink) -> VaultMonitor:
    def _sink_factory(channels: AlertChannels) -> RecordingAlertSink:
        alert_sink.channels.append(channels)
        return alert_sink

    return VaultMonitor(
        state=AppState(settings=settings, logger=logging.getLogger("test")),
        store=store,
        data_source=data_source,
        position_index=position_index,
        alert_sink_factory=_sink_factory,
    )
