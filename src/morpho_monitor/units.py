from __future__ import annotations

from decimal import Decimal


def from_base_units(value: int, decimals: int) -> Decimal:
    """Convert an integer on-chain amount to a human-readable decimal.

    Args:
        value: Integer amount expressed with ``decimals`` decimal places.
        decimals: Decimal precision of ``value``.

    Returns:
        The amount as an exact ``Decimal``.

    Notes:
        - Uses ``Decimal.scaleb`` so no rounding happens during the shift.
        - Negative ``decimals`` are rejected; token contracts cannot report them.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    return Decimal(value).scaleb(-decimals)


def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero instead of raising when the denominator is zero."""
    if denominator == 0:
        return Decimal(0)
    return numerator / denominator
