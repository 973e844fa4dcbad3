"""
Pydantic schemas for subscriptions and orders
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class SubscriptionActivate(BaseModel):
    plan_id: int


class SubscriptionUpgrade(BaseModel):
    new_plan_id: int
    days_remaining: int  # negative values are rejected with a 400, not a 422


class SubscriptionResponse(BaseModel):
    id: int
    team_id: int
    plan_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: int
    subscription_id: int
    created_at: datetime
    paid: bool

    model_config = ConfigDict(from_attributes=True)


class SubscriptionChangeResponse(BaseModel):
    """Subscription now in effect, the order it opened and any prorated charge"""
    subscription: SubscriptionResponse
    order: OrderResponse
    prorated_price: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
