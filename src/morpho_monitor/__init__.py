"""Liquidity monitoring and discovery for Morpho vaults."""

__version__ = "0.1.0"
