"""Integer-cent rounding helpers"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union


def round_half_up(value: Union[int, float, Decimal]) -> int:
    """Round to the nearest whole cent, halves rounding away from zero"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of(amount_cents: int, fraction: float) -> int:
    """Fraction of an amount in cents, rounded half up (e.g. 5% buffer)"""
    return round_half_up(Decimal(amount_cents) * Decimal(str(fraction)))
