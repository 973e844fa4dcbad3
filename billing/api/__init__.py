"""
API routers
"""

from billing.api import orders, plans, subscriptions, teams

__all__ = [
    "orders",
    "plans",
    "subscriptions",
    "teams",
]
