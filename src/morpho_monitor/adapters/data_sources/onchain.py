from __future__ import annotations

import asyncio

from eth_typing import URI
from web3 import Web3

from ...abi import load_erc20_abi, load_vault_abi
from ...domain import VaultState
from ...errors import VaultFetchError
from ...logger import get_logger
from ...settings import MonitorSettings
from .base import BaseVaultDataSource

logger = get_logger(__name__)


class Web3VaultDataSource(BaseVaultDataSource):
    """Reads ERC-4626 vault state through contract calls.

    The vault contract provides totals, the asset address and display
    metadata; the underlying ERC-20 provides its symbol and decimals.
    """

    def __init__(self, settings: MonitorSettings):
        self.settings = settings
        self.request_timeout = settings.fetch_timeout_seconds

    @property
    def source_name(self) -> str:
        return "web3"

    def _web3(self, rpc_url: str) -> Web3:
        return Web3(
            Web3.HTTPProvider(
                URI(rpc_url), request_kwargs={"timeout": self.request_timeout}
            )
        )

    async def fetch_vault_state(
        self, address: str, chain: str, rpc_url: str | None = None
    ) -> VaultState:
        if not Web3.is_address(address):
            raise VaultFetchError(address, chain, "not a valid address")

        endpoint = rpc_url or self.settings.rpc_url_for(chain)
        logger.debug("Reading vault %s on %s via %s", address, chain, endpoint)

        try:
            w3 = self._web3(endpoint)
            vault = w3.eth.contract(
                address=Web3.to_checksum_address(address), abi=load_vault_abi()
            )
            total_assets, total_supply, asset_address, name, symbol = (
                await asyncio.gather(
                    asyncio.to_thread(vault.functions.totalAssets().call),
                    asyncio.to_thread(vault.functions.totalSupply().call),
                    asyncio.to_thread(vault.functions.asset().call),
                    asyncio.to_thread(vault.functions.name().call),
                    asyncio.to_thread(vault.functions.symbol().call),
                )
            )

            asset = w3.eth.contract(
                address=Web3.to_checksum_address(asset_address), abi=load_erc20_abi()
            )
            asset_symbol, decimals = await asyncio.gather(
                asyncio.to_thread(asset.functions.symbol().call),
                asyncio.to_thread(asset.functions.decimals().call),
            )
        except Exception as e:
            raise VaultFetchError(address, chain, str(e)) from e

        if not isinstance(total_assets, int) or total_assets < 0:
            raise VaultFetchError(
                address, chain, f"unexpected totalAssets {total_assets!r}"
            )
        if not isinstance(total_supply, int) or total_supply < 0:
            raise VaultFetchError(
                address, chain, f"unexpected totalSupply {total_supply!r}"
            )
        if not isinstance(decimals, int) or decimals < 0:
            raise VaultFetchError(address, chain, f"unexpected decimals {decimals!r}")

        return VaultState(
            address=address,
            chain=chain,
            name=str(name),
            symbol=str(symbol),
            asset_address=str(asset_address),
            asset_symbol=str(asset_symbol),
            asset_decimals=decimals,
            total_assets_raw=total_assets,
            total_supply_raw=total_supply,
        )
