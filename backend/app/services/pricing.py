"""
Rental pricing rules.

A rental is billed per started day: days = max(1, ceil((end - start) / 1 day)),
so a same-day rental is one day and 25 hours is two.
"""

import math
from datetime import datetime, timedelta
from typing import Optional

DAY = timedelta(days=1)

# Percentage off the base price, keyed by upper-cased code
PROMO_CODES = {
    "SAVE10": 10,
    "WEEKEND5": 5,
}


def rental_days(start: datetime, end: datetime) -> int:
    return max(1, math.ceil((end - start) / DAY))


def total_price(start: datetime, end: datetime, daily_rate: float) -> float:
    return rental_days(start, end) * daily_rate


def locked_daily_rate(original_total: float, original_start: datetime, original_end: datetime) -> float:
    """
    Per-day rate a booking was sold at. Modifications reprice at this rate
    rather than the car's current listed price.
    """
    return original_total / rental_days(original_start, original_end)


def promo_percent(code: Optional[str]) -> int:
    if not code:
        return 0
    return PROMO_CODES.get(code.strip().upper(), 0)


def apply_promo(base: float, percent: int) -> float:
    """Discounted price, rounded up to a whole currency unit."""
    return float(math.ceil(base * (100 - percent) / 100))
