"""Pure liquidity computations on raw vault state."""

from __future__ import annotations

from decimal import Decimal, localcontext

from ..constants import AUTO_ADD_THRESHOLD_RATIO, SHARE_DECIMALS
from ..domain import (
    DerivedMetrics,
    DiscoveredVault,
    PositionData,
    VaultInfo,
    VaultState,
)
from ..units import from_base_units, safe_div

HUNDRED = Decimal(100)
PERCENT_QUANTUM = Decimal("0.01")


def compute_metrics(state: VaultState) -> DerivedMetrics:
    """Derive liquidity, share supply and utilization from raw vault state.

    Shares are always scaled by 18 decimals, whatever the vault itself
    reports, matching how MetaMorpho vaults mint shares.

    Args:
        state: Raw vault state from a data source

    Returns:
        DerivedMetrics with zero in place of any ratio whose denominator is zero
    """
    liquidity = from_base_units(state.total_assets_raw, state.asset_decimals)
    shares = from_base_units(state.total_supply_raw, SHARE_DECIMALS)

    utilization_rate = Decimal(0)
    if liquidity > 0 and shares > 0:
        utilization_rate = shares / liquidity * HUNDRED

    return DerivedMetrics(
        liquidity=liquidity,
        shares=shares,
        utilization_rate=utilization_rate,
    )


def build_vault_info(state: VaultState) -> VaultInfo:
    metrics = compute_metrics(state)
    return VaultInfo(
        address=state.address,
        chain=state.chain,
        name=state.name,
        symbol=state.symbol,
        asset=state.asset_address,
        asset_symbol=state.asset_symbol,
        asset_decimals=state.asset_decimals,
        liquidity=metrics.liquidity,
        shares=metrics.shares,
        utilization_rate=metrics.utilization_rate,
        fetched_at=state.fetched_at,
    )


def evaluate_threshold(liquidity: Decimal, threshold: Decimal) -> tuple[bool, Decimal]:
    """Compare liquidity against a threshold.

    Returns:
        ``(below_threshold, percent_of_threshold)`` with the percentage
        rounded to two decimal places
    """
    below = liquidity < threshold
    percent = safe_div(liquidity, threshold) * HUNDRED
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, percent.adjusted() + 3)
        percent = percent.quantize(PERCENT_QUANTUM)
    return below, percent


def share_price(total_assets_raw: int, total_supply_raw: int) -> Decimal:
    """Raw assets per raw share, zero for an empty vault."""
    return safe_div(Decimal(total_assets_raw), Decimal(total_supply_raw))


def derive_auto_add_threshold(liquidity: Decimal, default: Decimal) -> Decimal:
    if liquidity > 0:
        return liquidity * AUTO_ADD_THRESHOLD_RATIO
    return default


def build_discovered_vault(position: PositionData, chain: str) -> DiscoveredVault:
    """Turn an index position into a discovered vault with normalized amounts."""
    decimals = position.asset_decimals
    price = share_price(position.total_assets_raw, position.total_supply_raw)
    user_assets_raw = Decimal(position.user_shares_raw) * price

    return DiscoveredVault(
        chain=chain,
        address=position.vault_address,
        name=position.vault_name,
        symbol=position.vault_symbol,
        asset_symbol=position.asset_symbol,
        asset_decimals=decimals,
        user_shares=from_base_units(position.user_shares_raw, SHARE_DECIMALS),
        user_assets_value=user_assets_raw.scaleb(-decimals),
        liquidity=from_base_units(position.total_assets_raw, decimals),
    )
