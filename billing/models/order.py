"""
Order model - one billable event of a subscription
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, ForeignKey, Integer
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from billing.models.columns import timestamp_field

if TYPE_CHECKING:
    from billing.models.subscription import Subscription


class Order(SQLModel, table=True):
    """Order opened per billing cycle or plan change"""

    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    subscription_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("subscriptions.id", ondelete="RESTRICT", onupdate="RESTRICT"),
            nullable=False,
            index=True,
        ),
    )
    created_at: datetime = timestamp_field()
    paid: bool = Field(default=False, nullable=False)

    # Relationships
    subscription: Optional["Subscription"] = Relationship(back_populates="orders")

    def mark_paid(self) -> None:
        """Paid only ever moves from False to True"""
        if self.paid:
            raise ValueError("Order is already paid")

        self.paid = True
