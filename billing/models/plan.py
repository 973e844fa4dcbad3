"""
Plan model - priced offering a team subscribes to
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import CheckConstraint
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from billing.models.subscription import Subscription


class Plan(SQLModel, table=True):
    """Plan definition; price is an integer amount in the single billing currency"""

    __tablename__ = "plans"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_plans_price_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=255)  # not unique
    price: int = Field(nullable=False)

    # Relationships
    subscriptions: list["Subscription"] = Relationship(back_populates="plan")
