"""
Fixed-point helpers shared by the reports.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")
HUNDRED = Decimal(100)


def from_cents(cents: Optional[int]) -> Decimal:
    """Integer cents to a two-place Decimal (nulls count as zero)"""
    return (Decimal(cents or 0) / HUNDRED).quantize(CENT)


def round_half_up(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def ratio(numerator, denominator) -> Optional[Decimal]:
    """numerator / denominator rounded to 2 places, ``None`` when the denominator is zero"""
    if not denominator:
        return None
    return round_half_up(Decimal(numerator) / Decimal(denominator))


def percentage(numerator, denominator) -> Optional[Decimal]:
    """numerator / denominator * 100 rounded to 2 places, ``None`` when the denominator is zero"""
    if not denominator:
        return None
    return round_half_up(Decimal(numerator) * HUNDRED / Decimal(denominator))
