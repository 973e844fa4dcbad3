"""
Stores over the relational database
"""

from billing.repositories.plans import PlanRepository, PlanStore
from billing.repositories.users import UserRepository

__all__ = [
    "PlanRepository",
    "PlanStore",
    "UserRepository",
]
