"""
Schemas module
"""

from billing.schemas.plan import PlanCreate, PlanResponse, ProratedPriceResponse
from billing.schemas.team import TeamCreate, TeamResponse
from billing.schemas.subscription import (
    OrderResponse,
    SubscriptionActivate,
    SubscriptionChangeResponse,
    SubscriptionResponse,
    SubscriptionUpgrade,
)

__all__ = [
    "PlanCreate",
    "PlanResponse",
    "ProratedPriceResponse",
    "TeamCreate",
    "TeamResponse",
    "OrderResponse",
    "SubscriptionActivate",
    "SubscriptionChangeResponse",
    "SubscriptionResponse",
    "SubscriptionUpgrade",
]
