"""Static table of supported networks."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    DEFAULT_ARBITRUM_RPC_URL,
    DEFAULT_BASE_RPC_URL,
    DEFAULT_ETHEREUM_RPC_URL,
    DEFAULT_POLYGON_RPC_URL,
)
from .errors import UnknownChainError


@dataclass(frozen=True)
class Chain:
    """Network metadata for a supported chain."""

    key: str
    display_name: str
    chain_id: int
    rpc_url: str


CHAINS: dict[str, Chain] = {
    "ethereum": Chain("ethereum", "Ethereum", 1, DEFAULT_ETHEREUM_RPC_URL),
    "base": Chain("base", "Base", 8453, DEFAULT_BASE_RPC_URL),
    "polygon": Chain("polygon", "Polygon", 137, DEFAULT_POLYGON_RPC_URL),
    "arbitrum": Chain("arbitrum", "Arbitrum", 42161, DEFAULT_ARBITRUM_RPC_URL),
}

DEFAULT_CHAINS: tuple[str, ...] = tuple(CHAINS)


def get_chain(key: str) -> Chain:
    """Look up a chain by key (case-insensitive).

    Raises:
        UnknownChainError: If the chain is not in the table
    """
    chain = CHAINS.get(key.lower())
    if chain is None:
        raise UnknownChainError(key, tuple(CHAINS))
    return chain


def chain_id_for(key: str) -> int | None:
    chain = CHAINS.get(key.lower())
    return chain.chain_id if chain else None
