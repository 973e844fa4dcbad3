"""
Pydantic schemas for teams
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    is_personal: bool = False


class TeamResponse(BaseModel):
    id: int
    name: str
    is_personal: bool
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
