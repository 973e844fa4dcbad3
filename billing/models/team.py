"""
Team model - owner of subscriptions
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, ForeignKey, Index, Integer, text
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from billing.models.columns import timestamp_field

if TYPE_CHECKING:
    from billing.models.user import User
    from billing.models.subscription import Subscription


class Team(SQLModel, table=True):
    """Team owned by exactly one user"""

    __tablename__ = "teams"
    __table_args__ = (
        Index(
            "uq_teams_personal_owner",
            "user_id",
            unique=True,
            sqlite_where=text("is_personal = 1"),
            postgresql_where=text("is_personal"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=255)
    is_personal: bool = Field(default=False, nullable=False)

    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="RESTRICT", onupdate="RESTRICT"),
            nullable=False,
            index=True,
        ),
        description="Owning user",
    )

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

    # Relationships
    owner: Optional["User"] = Relationship(back_populates="teams")
    subscriptions: list["Subscription"] = Relationship(back_populates="team")
