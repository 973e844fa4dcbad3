"""
Order API endpoints
"""

from fastapi import APIRouter, Depends

from billing.core.dependencies import get_services, require
from billing.core.guards import Access, CallContext
from billing.schemas.subscription import OrderResponse
from billing.services.container import Services

router = APIRouter()


@router.post("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    order_id: int,
    ctx: CallContext = Depends(require(Access.ADMIN)),
    services: Services = Depends(get_services),
):
    """Record payment of an order (admin only)"""
    return await services.subscriptions.mark_paid(ctx, order_id)
