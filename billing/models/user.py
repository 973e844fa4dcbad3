"""
User model
"""

from sqlmodel import Field, SQLModel, Relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from billing.models.columns import timestamp_field

if TYPE_CHECKING:
    from billing.models.team import Team


class User(SQLModel, table=True):
    """Account holder; created by the registration flow, never hard-deleted"""

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Authentication
    email: str = Field(unique=True, index=True, nullable=False, max_length=255)
    hashed_password: Optional[str] = Field(default=None, nullable=True)
    email_verified: bool = Field(default=False)

    # Profile
    name: str = Field(nullable=False, max_length=255)
    locale: str = Field(default="en", nullable=False, max_length=16)
    timezone: Optional[str] = Field(default=None, max_length=64)

    # Only the operator path flips this flag
    is_admin: bool = Field(default=False, nullable=False)

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

    # Relationships
    teams: list["Team"] = Relationship(back_populates="owner")
