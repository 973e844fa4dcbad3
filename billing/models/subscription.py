"""
Subscription model binding a team to a plan
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, ForeignKey, Index, Integer, text
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from billing.models.columns import timestamp_field, utcnow

if TYPE_CHECKING:
    from billing.models.team import Team
    from billing.models.plan import Plan
    from billing.models.order import Order
    from billing.models.subscription_activation import SubscriptionActivation


class Subscription(SQLModel, table=True):
    """A team's subscription to a plan; at most one is active per team"""

    __tablename__ = "subscriptions"
    __table_args__ = (
        Index(
            "uq_subscriptions_active_team",
            "team_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    team_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("teams.id", ondelete="RESTRICT", onupdate="RESTRICT"),
            nullable=False,
            index=True,
        ),
    )
    plan_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("plans.id", ondelete="RESTRICT", onupdate="RESTRICT"),
            nullable=False,
            index=True,
        ),
    )

    is_active: bool = Field(default=True, nullable=False)

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

    # Relationships
    team: Optional["Team"] = Relationship(back_populates="subscriptions")
    plan: Optional["Plan"] = Relationship(back_populates="subscriptions")
    orders: list["Order"] = Relationship(back_populates="subscription")
    activations: list["SubscriptionActivation"] = Relationship(back_populates="subscription")

    def activate(self) -> None:
        """Mark an inactive subscription active again"""
        if self.is_active:
            raise ValueError("Subscription is already active")

        self.is_active = True
        self.updated_at = utcnow()

    def deactivate(self) -> None:
        """Take the subscription out of effect"""
        if not self.is_active:
            raise ValueError("Subscription is not active")

        self.is_active = False
        self.updated_at = utcnow()
