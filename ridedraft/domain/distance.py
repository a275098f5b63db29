"""
Distance conversions for routing results.

The routing service reports meters; fares are quoted per kilometer. The
kilometer figure is rounded to two places *before* pricing so the distance
shown to the user and the one the price is computed from are the same.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

METERS_PER_KM = Decimal(1000)
TWO_PLACES = Decimal("0.01")


def meters_to_km(meters: float | Decimal) -> Decimal:
    """Return *meters* as kilometers, rounded half-up to 2 decimals."""
    km = Decimal(str(meters)) / METERS_PER_KM
    return km.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
