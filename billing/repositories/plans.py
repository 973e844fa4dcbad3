"""
Plan store
"""

from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import async_sessionmaker

from billing.models.plan import Plan


class PlanStore(Protocol):
    async def get(self, plan_id: int) -> Optional[Plan]:
        ...

    async def add(self, name: str, price: int) -> Plan:
        ...

    async def update(self, plan_id: int, name: str, price: int) -> Optional[Plan]:
        ...


class PlanRepository:
    """Plan rows, one short-lived session per call so lookups can run side by side"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get(self, plan_id: int) -> Optional[Plan]:
        async with self.session_factory() as session:
            return await session.get(Plan, plan_id)

    async def add(self, name: str, price: int) -> Plan:
        async with self.session_factory() as session:
            plan = Plan(name=name, price=price)
            session.add(plan)
            await session.commit()
            await session.refresh(plan)
            return plan

    async def update(self, plan_id: int, name: str, price: int) -> Optional[Plan]:
        async with self.session_factory() as session:
            plan = await session.get(Plan, plan_id)
            if plan is None:
                return None

            plan.name = name
            plan.price = price
            session.add(plan)
            await session.commit()
            await session.refresh(plan)
            return plan
