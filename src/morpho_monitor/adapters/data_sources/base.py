from __future__ import annotations

from abc import ABC, abstractmethod

from ...domain import PositionData, VaultState


class BaseVaultDataSource(ABC):
    """Reads live vault state for a single vault."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the name of this data source."""
        ...

    @abstractmethod
    async def fetch_vault_state(
        self, address: str, chain: str, rpc_url: str | None = None
    ) -> VaultState:
        """Fetch the current state of ``address`` on ``chain``.

        Args:
            address: Vault contract address
            chain: Chain key from the chain table
            rpc_url: Optional endpoint overriding the chain default

        Raises:
            VaultFetchError: If the vault cannot be read or looks malformed
        """
        ...


class BasePositionIndex(ABC):
    """Looks up the vault positions an account holds."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the name of this index."""
        ...

    @abstractmethod
    async def query_positions(
        self, account: str, chain_ids: list[int]
    ) -> list[PositionData]:
        """Return every vault position ``account`` holds on ``chain_ids``.

        Raises:
            IndexQueryError: If the index errors or returns an unexpected shape
        """
        ...
