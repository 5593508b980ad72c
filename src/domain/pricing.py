"""
Delivery Pricing
================

Formula
-------
* miles <= 0.3                -> flat 3.00 base fare
* otherwise                   -> 2.00 + ceil((miles - 0.2) / 0.1) x 0.70

The base-fare threshold (0.3) and the increment basis (0.2) are distinct
constants and must stay that way.  ``(miles - 0.2) / 0.1`` is rounded to
nine decimal places before the ceiling so that binary representation error
(e.g. ``0.8 / 0.1 == 7.999999999999999``) never adds a spurious increment.

Amounts are ``Decimal`` internally and rounded half away from zero to cents.

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, Optional

from .entities import CartItem

BASE_FARE_MAX_MILES = 0.3
BASE_FARE = Decimal("3.00")
INCREMENT_BASIS_MILES = 0.2
INCREMENT_MILES = 0.1
INCREMENT_START = Decimal("2.00")
INCREMENT_PRICE = Decimal("0.70")

_CENTS = Decimal("0.01")
_STEP_PRECISION = 9


def to_cents(amount: Decimal) -> Decimal:
    with localcontext() as ctx:
        # quantize needs every integer digit plus two for cents
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def delivery_price(miles: Optional[float]) -> Optional[Decimal]:
    """Tiered delivery fee for *miles*, or ``None`` when distance is unknown."""
    if miles is None or not math.isfinite(miles):
        return None
    if miles <= BASE_FARE_MAX_MILES:
        return BASE_FARE

    over = miles - INCREMENT_BASIS_MILES
    increments = math.ceil(round(over / INCREMENT_MILES, _STEP_PRECISION))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(str(increments)) + 3)
        return to_cents(INCREMENT_START + increments * INCREMENT_PRICE)


def compute_delivery_price(miles: Optional[float]) -> Optional[float]:
    """Float facade over :func:`delivery_price` for JSON callers."""
    price = delivery_price(miles)
    return float(price) if price is not None else None


def cart_subtotal(items: Iterable[CartItem]) -> Decimal:
    return to_cents(sum((item.line_total for item in items), Decimal("0")))
