from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from morpho_monitor.processors import (
    build_discovered_vault,
    build_vault_info,
    compute_metrics,
    derive_auto_add_threshold,
    evaluate_threshold,
    share_price,
)

from conftest import VAULT_A, make_position, make_vault_state


def test_compute_metrics_scales_by_asset_and_share_decimals():
    state = make_vault_state(VAULT_A, "1234.5", decimals=6, shares=1000)

    metrics = compute_metrics(state)

    assert metrics.liquidity == Decimal("1234.5")
    assert metrics.shares == Decimal(1000)


def test_compute_metrics_shares_always_use_18_decimals():
    state = make_vault_state(VAULT_A, 100, decimals=8, shares=50)

    assert compute_metrics(state).shares == Decimal(50)


def test_utilization_rate_is_shares_over_liquidity():
    state = make_vault_state(VAULT_A, 200, shares=50)

    assert compute_metrics(state).utilization_rate == Decimal(25)


def test_utilization_rate_is_zero_for_empty_vault():
    assert compute_metrics(make_vault_state(VAULT_A, 0, shares=0)).utilization_rate == 0
    assert compute_metrics(make_vault_state(VAULT_A, 0, shares=10)).utilization_rate == 0
    assert compute_metrics(make_vault_state(VAULT_A, 10, shares=0)).utilization_rate == 0


def test_large_raw_amounts_stay_exact():
    raw = 123_456_789_012_345_678_901_234_567_890
    state = make_vault_state(VAULT_A, 0)
    state = replace(state, total_assets_raw=raw, asset_decimals=18)

    assert compute_metrics(state).liquidity == Decimal("123456789012.345678901234567890")


def test_build_vault_info_carries_metadata():
    state = make_vault_state(VAULT_A, 1500, chain="base")

    info = build_vault_info(state)

    assert info.address == VAULT_A
    assert info.chain == "base"
    assert info.asset_symbol == "USDC"
    assert info.asset_decimals == 6
    assert info.liquidity == Decimal(1500)
    assert info.to_dict()["assetSymbol"] == "USDC"
    assert Decimal(info.to_dict()["liquidity"]) == 1500


def test_evaluate_threshold_below_and_above():
    assert evaluate_threshold(Decimal(900), Decimal(1000)) == (True, Decimal("90.00"))
    assert evaluate_threshold(Decimal(1500), Decimal(1000)) == (False, Decimal("150.00"))


def test_evaluate_threshold_equal_is_not_below():
    below, percent = evaluate_threshold(Decimal(1000), Decimal(1000))

    assert below is False
    assert str(percent) == "100.00"


def test_evaluate_threshold_rounds_to_two_places():
    _, percent = evaluate_threshold(Decimal(1), Decimal(3))

    assert str(percent) == "33.33"


def test_evaluate_threshold_handles_huge_ratios():
    _, percent = evaluate_threshold(Decimal(10) ** 40, Decimal("0.000001"))

    assert percent == Decimal(10) ** 48


def test_share_price_zero_supply():
    assert share_price(100, 0) == 0
    assert share_price(200, 100) == Decimal(2)


def test_derive_auto_add_threshold():
    default = Decimal(500_000)

    assert derive_auto_add_threshold(Decimal(2_000_000), default) == Decimal(1_600_000)
    assert derive_auto_add_threshold(Decimal(0), default) == default


def test_build_discovered_vault_values_user_position():
    position = make_position(VAULT_A, 1000, chain_id=8453, user_shares=25)

    vault = build_discovered_vault(position, "base")

    assert vault.chain == "base"
    assert vault.address == VAULT_A
    assert vault.user_shares == Decimal(25)
    assert vault.user_assets_value == Decimal(25)
    assert vault.liquidity == Decimal(1000)


def test_build_discovered_vault_empty_vault_has_zero_value():
    vault = build_discovered_vault(make_position(VAULT_A, 0, user_shares=5), "ethereum")

    assert vault.user_assets_value == 0
    assert vault.liquidity == 0
