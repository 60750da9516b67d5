import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
MIN_BILLABLE_HOURS = 1


def billable_hours(checked_in_at: datetime, checked_out_at: datetime) -> int:
    """
    Whole hours to charge for a stay. Partial hours round up, and every
    stay costs at least one hour (including zero-length or clock-skewed ones).
    """
    seconds = (checked_out_at - checked_in_at).total_seconds()
    return max(MIN_BILLABLE_HOURS, math.ceil(seconds / 3600))


def compute_charge(checked_in_at: datetime, checked_out_at: datetime, price_per_hour) -> Decimal:
    rate = Decimal(str(price_per_hour))
    if rate < 0:
        raise ValueError("price_per_hour must be non-negative")
    hours = billable_hours(checked_in_at, checked_out_at)
    return (rate * hours).quantize(CENTS, rounding=ROUND_HALF_UP)
