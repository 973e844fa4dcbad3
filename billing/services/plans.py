"""
Plan registry and its caller-facing procedures
"""

import asyncio
import structlog

from billing.core.errors import BadRequest, NotFound
from billing.core.guards import Access, AccessGuard, AuthenticatedUser
from billing.models.plan import Plan
from billing.repositories.plans import PlanStore
from billing.services.proration import calculate_prorated_price

logger = structlog.get_logger(__name__)


def _check_price(price: int) -> None:
    if price < 0:
        raise BadRequest("Plan price must not be negative")


class PlanRegistry:
    """CRUD over plan definitions plus upgrade pricing"""

    def __init__(self, store: PlanStore):
        self.store = store

    async def create(self, name: str, price: int) -> Plan:
        _check_price(price)
        return await self.store.add(name=name, price=price)

    async def update(self, plan_id: int, name: str, price: int) -> Plan:
        existing = await self.store.get(plan_id)
        if existing is None:
            raise NotFound("Plan not found")

        _check_price(price)

        # No version check: concurrent updates are last-write-wins
        plan = await self.store.update(plan_id, name=name, price=price)
        if plan is None:
            raise NotFound("Plan not found")

        return plan

    async def read(self, plan_id: int) -> Plan:
        plan = await self.store.get(plan_id)
        if plan is None:
            raise NotFound("Plan not found")
        return plan

    async def prorated_upgrade_price(
        self,
        current_plan_id: int,
        new_plan_id: int,
        days_remaining: int,
    ) -> float:
        if days_remaining < 0:
            raise BadRequest("Remaining days should not be negative")

        current_plan, new_plan = await asyncio.gather(
            self.store.get(current_plan_id),
            self.store.get(new_plan_id),
        )
        if current_plan is None or new_plan is None:
            raise BadRequest("Invalid plan IDs")

        return calculate_prorated_price(current_plan.price, new_plan.price, days_remaining)


class PlanProcedures:
    """Plan operations behind their access gates"""

    def __init__(self, guard: AccessGuard, registry: PlanRegistry):
        self.registry = registry

        self.create = guard.protect(Access.ADMIN)(self._create)
        self.update = guard.protect(Access.ADMIN)(self._update)
        self.read = guard.protect(Access.AUTHENTICATED)(self._read)
        self.prorated_upgrade_price = guard.protect(Access.AUTHENTICATED)(self._prorated_upgrade_price)

    async def _create(self, user: AuthenticatedUser, name: str, price: int) -> Plan:
        plan = await self.registry.create(name, price)
        logger.info(f"Plan {plan.id} created by admin {user.user_id}")
        return plan

    async def _update(self, user: AuthenticatedUser, plan_id: int, name: str, price: int) -> Plan:
        plan = await self.registry.update(plan_id, name, price)
        logger.info(f"Plan {plan_id} updated by admin {user.user_id}")
        return plan

    async def _read(self, user: AuthenticatedUser, plan_id: int) -> Plan:
        return await self.registry.read(plan_id)

    async def _prorated_upgrade_price(
        self,
        user: AuthenticatedUser,
        current_plan_id: int,
        new_plan_id: int,
        days_remaining: int,
    ) -> dict:
        prorated_price = await self.registry.prorated_upgrade_price(
            current_plan_id, new_plan_id, days_remaining
        )
        return {"prorated_price": prorated_price}
