from __future__ import annotations

from decimal import Decimal

import pytest

from morpho_monitor.units import from_base_units, safe_div


def test_from_base_units_scales_down():
    assert from_base_units(1_500_000, 6) == Decimal("1.5")
    assert from_base_units(10**18, 18) == Decimal(1)


def test_from_base_units_zero_decimals():
    assert from_base_units(42, 0) == Decimal(42)


def test_from_base_units_rejects_negative_decimals():
    with pytest.raises(ValueError):
        from_base_units(1, -1)


def test_safe_div():
    assert safe_div(Decimal(1), Decimal(0)) == 0
    assert safe_div(Decimal(3), Decimal(2)) == Decimal("1.5")
