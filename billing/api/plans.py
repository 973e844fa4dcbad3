"""
Plan API endpoints
"""

from fastapi import APIRouter, Depends, status

from billing.core.dependencies import get_services, require
from billing.core.guards import Access, CallContext
from billing.schemas.plan import PlanCreate, PlanResponse, ProratedPriceResponse
from billing.services.container import Services

router = APIRouter()


@router.post("/", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_data: PlanCreate,
    ctx: CallContext = Depends(require(Access.ADMIN)),
    services: Services = Depends(get_services),
):
    """Create a plan (admin only)"""
    return await services.plans.create(ctx, plan_data.name, plan_data.price)


# Declared before /{plan_id} so the literal path is matched first
@router.get("/prorated-upgrade-price", response_model=ProratedPriceResponse)
async def get_prorated_upgrade_price(
    current_plan_id: int,
    new_plan_id: int,
    days_remaining: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Price of upgrading between two plans for the remaining days of the cycle"""
    return await services.plans.prorated_upgrade_price(
        ctx, current_plan_id, new_plan_id, days_remaining
    )


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: int,
    ctx: CallContext = Depends(require(Access.AUTHENTICATED)),
    services: Services = Depends(get_services),
):
    """Get a plan by ID"""
    return await services.plans.read(ctx, plan_id)


@router.put("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: int,
    plan_data: PlanCreate,
    ctx: CallContext = Depends(require(Access.ADMIN)),
    services: Services = Depends(get_services),
):
    """Overwrite a plan's name and price (admin only)"""
    return await services.plans.update(ctx, plan_id, plan_data.name, plan_data.price)
