"""
Prorated pricing for mid-cycle plan upgrades
"""

from billing.core.errors import BadRequest

# Fixed billing period, independent of the actual month length
BILLING_PERIOD_DAYS = 30


def calculate_prorated_price(current_price: int, new_price: int, days_remaining: int) -> float:
    """Cost of moving to a more expensive plan for the rest of the cycle.

    The daily rate is not rounded; callers receive the exact float product.
    """
    if days_remaining < 0:
        raise BadRequest("Remaining days should not be negative")

    if new_price <= current_price:
        raise BadRequest("New plan price must be greater than current plan price for an upgrade")

    daily_rate = (new_price - current_price) / BILLING_PERIOD_DAYS
    return daily_rate * days_remaining
