"""
Append-only record of each time a subscription became active
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, ForeignKey, Integer
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from billing.models.columns import timestamp_field

if TYPE_CHECKING:
    from billing.models.subscription import Subscription


class SubscriptionActivation(SQLModel, table=True):
    __tablename__ = "subscription_activations"

    id: Optional[int] = Field(default=None, primary_key=True)
    subscription_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("subscriptions.id", ondelete="RESTRICT", onupdate="RESTRICT"),
            nullable=False,
            index=True,
        ),
    )
    activation_date: datetime = timestamp_field()

    subscription: Optional["Subscription"] = Relationship(back_populates="activations")
