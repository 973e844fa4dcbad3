"""
Pydantic schemas for plans
"""

from pydantic import BaseModel, ConfigDict, Field


class PlanCreate(BaseModel):
    """Plan fields for create and full update"""
    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0, description="Integer amount in the billing currency")


class PlanResponse(BaseModel):
    """Plan response model"""
    id: int
    name: str
    price: int

    model_config = ConfigDict(from_attributes=True)


class ProratedPriceResponse(BaseModel):
    """Unrounded charge for the rest of the billing cycle"""
    prorated_price: float
