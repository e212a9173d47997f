"""Vault monitoring and discovery engine."""

from __future__ import annotations

import asyncio
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from .adapters.data_sources import (
    BasePositionIndex,
    BaseVaultDataSource,
    MorphoApiPositionIndex,
    Web3VaultDataSource,
)
from .alerts import AlertSink, BaseAlertSink
from .chains import CHAINS, DEFAULT_CHAINS, chain_id_for, get_chain
from .config import AlertChannels, MonitorConfig, TrackedVault
from .constants import DEFAULT_CHAIN, DEFAULT_HISTORY_DAYS
from .domain import (
    AutoAddOutcome,
    CheckOutcome,
    CheckResult,
    DiscoveredVault,
    DiscoveryOutcome,
    FetchFailure,
    HistoryStub,
    MonitorStatus,
    VaultInfo,
)
from .errors import (
    DuplicateVaultError,
    IndexQueryError,
    InvalidThresholdError,
    MonitorError,
    VaultFetchError,
)
from .processors import (
    build_discovered_vault,
    build_vault_info,
    derive_auto_add_threshold,
    evaluate_threshold,
)
from .state import AppState
from .store import (
    VaultRegistryStore,
    add_tracked_vault,
    find_tracked_vault,
    remove_tracked_vault,
)

AlertSinkFactory = Callable[[AlertChannels], BaseAlertSink]

# Failures isolated per vault / per chain inside batch operations
ISOLATED_ERRORS = (MonitorError, TimeoutError)


def parse_threshold(value: Any) -> Decimal:
    """Coerce a user-supplied threshold to a finite, positive Decimal.

    Raises:
        InvalidThresholdError: If the value is not a number, not finite, or <= 0
    """
    if isinstance(value, bool):
        raise InvalidThresholdError(f"Threshold must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidThresholdError(f"Threshold must be finite, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidThresholdError(f"Threshold must be a number, got {value!r}") from e
    if not amount.is_finite():
        raise InvalidThresholdError(f"Threshold must be finite, got {value!r}")
    if amount <= 0:
        raise InvalidThresholdError(f"Threshold must be positive, got {value!r}")
    return amount


class VaultMonitor:
    """Tracks vault liquidity against per-vault thresholds.

    Every operation loads the registry fresh from the store; operations that
    change it hold ``_lock`` from load to save so concurrent calls on the
    same monitor never interleave their writes.
    """

    def __init__(
        self,
        state: AppState,
        store: VaultRegistryStore,
        data_source: BaseVaultDataSource,
        position_index: BasePositionIndex,
        alert_sink_factory: AlertSinkFactory,
    ):
        self.state = state
        self.settings = state.settings
        self.log = state.logger
        self.store = store
        self.data_source = data_source
        self.position_index = position_index
        self.alert_sink_factory = alert_sink_factory
        self._lock = asyncio.Lock()

    @classmethod
    def from_state(cls, state: AppState) -> "VaultMonitor":
        settings = state.settings
        return cls(
            state=state,
            store=VaultRegistryStore.from_settings(settings),
            data_source=Web3VaultDataSource(settings),
            position_index=MorphoApiPositionIndex.from_settings(settings),
            alert_sink_factory=lambda channels: AlertSink.from_settings(
                settings, channels
            ),
        )

    async def _load(self) -> MonitorConfig:
        return await asyncio.to_thread(self.store.load)

    async def _save(self, config: MonitorConfig) -> None:
        await asyncio.to_thread(self.store.save, config)

    async def _fetch_info(
        self, address: str, chain: str, config: MonitorConfig
    ) -> VaultInfo:
        rpc_url = self.settings.rpc_url_for(chain, config.rpc_url)
        timeout_s = self.settings.fetch_timeout_seconds
        try:
            async with asyncio.timeout(timeout_s):
                vault_state = await self.data_source.fetch_vault_state(
                    address, chain, rpc_url
                )
        except TimeoutError as e:
            raise VaultFetchError(address, chain, f"timed out after {timeout_s}s") from e
        return build_vault_info(vault_state)

    async def add_vault(
        self, address: str, threshold: Any, chain: str = DEFAULT_CHAIN
    ) -> VaultInfo:
        """Validate a vault on-chain and start tracking it.

        Args:
            address: Vault contract address
            threshold: Liquidity level (asset units) below which to alert
            chain: Chain key the vault lives on

        Returns:
            The vault's current info and metrics

        Raises:
            InvalidThresholdError: If threshold is not a finite positive number
            UnknownChainError: If chain is not supported
            DuplicateVaultError: If the address is already tracked
            VaultFetchError: If the vault cannot be read
            StoreError: If the registry cannot be written
        """
        amount = parse_threshold(threshold)
        chain_key = get_chain(chain).key

        async with self._lock:
            config = await self._load()
            if find_tracked_vault(config, address) is not None:
                raise DuplicateVaultError(address)

            info = await self._fetch_info(address, chain_key, config)
            tracked = TrackedVault(
                address=address,
                chain=chain_key,
                threshold=amount,
                name=info.name,
                symbol=info.symbol,
                asset_symbol=info.asset_symbol,
            )
            await self._save(add_tracked_vault(config, tracked))

        self.log.info(
            "Tracking %s (%s) on %s with threshold %s %s",
            info.name,
            address,
            chain_key,
            amount,
            info.asset_symbol,
        )
        return info

    async def remove_vault(self, address: str) -> bool:
        """Stop tracking ``address``; returns False when it was not tracked."""
        async with self._lock:
            config = await self._load()
            updated = remove_tracked_vault(config, address)
            await self._save(updated)

        removed = len(updated.vaults) < len(config.vaults)
        if removed:
            self.log.info("Removed vault %s", address)
        else:
            self.log.debug("Vault %s was not tracked", address)
        return removed

    async def _check_vault(
        self, vault: TrackedVault, config: MonitorConfig, sink: BaseAlertSink
    ) -> CheckResult:
        info = await self._fetch_info(vault.address, vault.chain, config)
        below, percent = evaluate_threshold(info.liquidity, vault.threshold)
        if below:
            await sink.send(vault, info)
        return CheckResult(
            vault=vault,
            info=info,
            threshold=vault.threshold,
            below_threshold=below,
            percent_of_threshold=percent,
        )

    async def check_all(self) -> CheckOutcome:
        """Run one check cycle over every tracked vault.

        Vaults are fetched concurrently; results keep registry order. A
        vault that cannot be read is recorded in ``failures`` and the rest
        of the cycle continues. Every breaching vault is alerted once.
        """
        config = await self._load()
        outcome = CheckOutcome()
        if not config.vaults:
            self.log.info("No vaults are being monitored")
            return outcome

        sink = self.alert_sink_factory(config.alert_channels)
        self.log.info("Checking %d vault(s)...", len(config.vaults))

        results = await asyncio.gather(
            *[self._check_vault(vault, config, sink) for vault in config.vaults],
            return_exceptions=True,
        )

        for vault, result in zip(config.vaults, results):
            if isinstance(result, ISOLATED_ERRORS):
                self.log.error("Error checking vault %s: %s", vault.address, result)
                outcome.failures.append(
                    FetchFailure(target=vault.address, chain=vault.chain, error=str(result))
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome.results.append(result)

        self.log.info(
            "Check complete: %d ok, %d below threshold, %d failed",
            len(outcome.results),
            len(outcome.breaches),
            len(outcome.failures),
        )
        return outcome

    async def get_status(self) -> MonitorStatus:
        config = await self._load()
        return MonitorStatus(
            vaults=[v.model_copy() for v in config.vaults],
            alert_channels=config.alert_channels.model_copy(),
        )

    async def get_vault_info(self, address: str, chain: str = DEFAULT_CHAIN) -> VaultInfo:
        chain_key = get_chain(chain).key
        config = await self._load()
        return await self._fetch_info(address, chain_key, config)

    async def get_history(
        self, address: str, days: int = DEFAULT_HISTORY_DAYS
    ) -> HistoryStub:
        # TODO: back this with the Morpho API historicalState time series
        if days <= 0:
            raise ValueError(f"days must be positive, got {days}")
        return HistoryStub(vault=address, period=f"{days} days")

    async def _scan_chain(
        self, account: str, chain_key: str, chain_id: int
    ) -> list[DiscoveredVault]:
        timeout_s = self.settings.fetch_timeout_seconds
        try:
            async with asyncio.timeout(timeout_s):
                positions = await self.position_index.query_positions(
                    account, [chain_id]
                )
        except TimeoutError as e:
            raise IndexQueryError(
                f"Position query on {chain_key} timed out after {timeout_s}s"
            ) from e
        return [build_discovered_vault(position, chain_key) for position in positions]

    async def discover_vaults(
        self, account: str, chains: Iterable[str] | None = None
    ) -> DiscoveryOutcome:
        """Find the vaults ``account`` holds positions in.

        Chains without a known chain id are skipped. Each chain is queried
        concurrently; a failing chain is recorded and the others still
        contribute. Vaults are ordered by chain, then as the index returned them.
        """
        outcome = DiscoveryOutcome()
        targets: list[tuple[str, int]] = []
        for key in DEFAULT_CHAINS if chains is None else chains:
            chain_id = chain_id_for(key)
            if chain_id is None:
                self.log.warning("Chain %s is not supported for discovery, skipping", key)
                outcome.skipped_chains.append(key)
                continue
            targets.append((CHAINS[key.lower()].key, chain_id))

        self.log.info(
            "Discovering vaults for %s on %s",
            account,
            ", ".join(key for key, _ in targets) or "no chains",
        )

        results = await asyncio.gather(
            *[self._scan_chain(account, key, chain_id) for key, chain_id in targets],
            return_exceptions=True,
        )

        for (key, _), result in zip(targets, results):
            display_name = CHAINS[key].display_name
            if isinstance(result, ISOLATED_ERRORS):
                self.log.warning("Error scanning %s: %s", display_name, result)
                outcome.failures.append(
                    FetchFailure(target=key, chain=key, error=str(result))
                )
            elif isinstance(result, BaseException):
                raise result
            else:
                self.log.info("Found %d vault(s) on %s", len(result), display_name)
                outcome.vaults.extend(result)

        return outcome

    async def auto_add_discovered(
        self,
        account: str,
        default_threshold: Any = None,
        chains: Iterable[str] | None = None,
    ) -> AutoAddOutcome:
        """Discover ``account``'s vaults and track the ones not yet tracked.

        New vaults alert at 80% of their current liquidity, or at
        ``default_threshold`` when they currently hold nothing. Tracked
        addresses are left untouched. The registry is saved once at the end.
        """
        fallback = parse_threshold(
            self.settings.default_auto_add_threshold
            if default_threshold is None
            else default_threshold
        )

        discovery = await self.discover_vaults(account, chains)
        outcome = AutoAddOutcome(
            discovered=list(discovery.vaults), failures=list(discovery.failures)
        )
        self.log.info("Auto-adding %d vault(s) to monitoring", len(discovery.vaults))

        async with self._lock:
            config = await self._load()
            for vault in discovery.vaults:
                if find_tracked_vault(config, vault.address) is not None:
                    self.log.info("Already monitoring: %s (%s)", vault.name, vault.address)
                    outcome.skipped.append(vault)
                    continue

                tracked = TrackedVault(
                    address=vault.address,
                    chain=vault.chain,
                    threshold=derive_auto_add_threshold(vault.liquidity, fallback),
                    name=vault.name,
                    symbol=vault.symbol,
                    asset_symbol=vault.asset_symbol,
                    auto_discovered=True,
                    user_shares=vault.user_shares,
                )
                config = add_tracked_vault(config, tracked)
                outcome.added.append(tracked)
                self.log.info(
                    "Added %s on %s with threshold %.2f %s",
                    vault.name,
                    vault.chain,
                    tracked.threshold,
                    vault.asset_symbol,
                )

            await self._save(config)

        return outcome
