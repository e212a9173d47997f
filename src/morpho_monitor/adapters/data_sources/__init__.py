from __future__ import annotations

from .base import BasePositionIndex, BaseVaultDataSource
from .morpho_api import MorphoApiPositionIndex
from .onchain import Web3VaultDataSource

__all__ = [
    "BasePositionIndex",
    "BaseVaultDataSource",
    "MorphoApiPositionIndex",
    "Web3VaultDataSource",
]
