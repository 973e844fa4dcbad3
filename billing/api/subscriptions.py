"""
Subscription API endpoints, nested under the owning team
"""

from fastapi import APIRouter, Depends
from typing import List

from billing.core.dependencies import get_services, require
from billing.core.guards import Access, CallContext
from billing.schemas.subscription import (
    OrderResponse,
    SubscriptionActivate,
    SubscriptionChangeResponse,
    SubscriptionResponse,
    SubscriptionUpgrade,
)
from billing.services.container import Services

router = APIRouter()


@router.get("/{team_id}/subscription", response_model=SubscriptionResponse)
async def get_active_subscription(
    team_id: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Get the team's active subscription"""
    return await services.subscriptions.active(ctx, team_id)


@router.get("/{team_id}/subscriptions", response_model=List[SubscriptionResponse])
async def list_subscriptions(
    team_id: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """All of the team's subscriptions, newest first"""
    return await services.subscriptions.history(ctx, team_id)


@router.post("/{team_id}/subscription", response_model=SubscriptionChangeResponse)
async def activate_subscription(
    team_id: int,
    payload: SubscriptionActivate,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Subscribe the team to a plan, replacing any active subscription"""
    change = await services.subscriptions.activate(ctx, team_id, payload.plan_id)
    return SubscriptionChangeResponse.model_validate(change)


@router.post("/{team_id}/subscription/upgrade", response_model=SubscriptionChangeResponse)
async def upgrade_subscription(
    team_id: int,
    payload: SubscriptionUpgrade,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Move the team to a more expensive plan mid-cycle"""
    change = await services.subscriptions.upgrade(
        ctx, team_id, payload.new_plan_id, payload.days_remaining
    )
    return SubscriptionChangeResponse.model_validate(change)


@router.delete("/{team_id}/subscription", response_model=SubscriptionResponse)
async def cancel_subscription(
    team_id: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Deactivate the team's active subscription"""
    return await services.subscriptions.cancel(ctx, team_id)


@router.get("/{team_id}/orders", response_model=List[OrderResponse])
async def list_orders(
    team_id: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Orders across all of the team's subscriptions, newest first"""
    return await services.subscriptions.orders(ctx, team_id)
