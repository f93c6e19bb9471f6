"""
Estimate of the CO2 a buyer avoids by purchasing second-hand.

The figure is display text, not a ledger value: every call draws fresh
jitter, so the same purchase shows different numbers across renders and a
total is a sum of independent draws. Results are never persisted.
"""

import math
import random
from collections.abc import Iterable
from decimal import Decimal

from ecofinds.config import CO2_JITTER, CO2_MINIMUM_KG, CO2_PRICE_FACTOR


def estimate_co2_savings(price: Decimal | float, rng: random.Random | None = None) -> int:
    """
    Estimate kg of CO2 saved for one item.

    Args:
        price: Non-negative item price
        rng: Random source; pass a seeded or stub instance for repeatable output

    Returns:
        floor(price * 0.1 + U[0, 2)), at least 1
    """
    if price < 0:
        raise ValueError("price must be non-negative")

    rng = rng or random
    jitter = rng.random() * CO2_JITTER
    return max(CO2_MINIMUM_KG, math.floor(float(price) * CO2_PRICE_FACTOR + jitter))


def total_co2_savings(prices: Iterable[Decimal | float], rng: random.Random | None = None) -> int:
    """Sum per-item estimates, drawing independently for each item."""
    return sum(estimate_co2_savings(price, rng) for price in prices)
