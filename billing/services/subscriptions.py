"""
Subscription lifecycle

A team has at most one active subscription. Every change runs in a single
transaction that locks the team's active row, deactivates it and flushes
before the next subscription becomes active; the partial unique index on
subscriptions(team_id) rejects whatever slips past on databases without row
locks.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
import structlog

from billing.core.errors import BadRequest, NotFound
from billing.core.guards import Access, AccessGuard, AuthenticatedUser
from billing.models.order import Order
from billing.models.plan import Plan
from billing.models.subscription import Subscription
from billing.models.subscription_activation import SubscriptionActivation
from billing.services.plans import PlanRegistry
from billing.services.teams import get_owned_team

logger = structlog.get_logger(__name__)


@dataclass
class SubscriptionChange:
    """Outcome of a plan switch"""
    subscription: Subscription
    order: Order
    prorated_price: Optional[float] = None


async def _active_subscription(session, team_id: int, for_update: bool = False) -> Optional[Subscription]:
    query = select(Subscription).where(
        Subscription.team_id == team_id,
        Subscription.is_active == True,  # noqa: E712
    )
    if for_update:
        query = query.with_for_update()
    result = await session.exec(query)
    return result.first()


class SubscriptionService:
    def __init__(self, session_factory: async_sessionmaker, plans: PlanRegistry):
        self.session_factory = session_factory
        self.plans = plans

    async def _switch(
        self,
        session,
        team_id: int,
        plan_id: int,
        current: Optional[Subscription],
    ) -> Tuple[Subscription, Order]:
        if current is not None:
            current.deactivate()
            session.add(current)
            await session.flush()

        # Reuse the team's latest inactive subscription to this plan
        result = await session.exec(
            select(Subscription)
            .where(
                Subscription.team_id == team_id,
                Subscription.plan_id == plan_id,
                Subscription.is_active == False,  # noqa: E712
            )
            .order_by(Subscription.id.desc())
        )
        subscription = result.first()
        if subscription is None:
            subscription = Subscription(team_id=team_id, plan_id=plan_id)
        else:
            subscription.activate()
        session.add(subscription)
        await session.flush()

        order = Order(subscription_id=subscription.id)
        session.add(SubscriptionActivation(subscription_id=subscription.id))
        session.add(order)
        await session.flush()
        return subscription, order

    async def activate(self, owner_id: int, team_id: int, plan_id: int) -> SubscriptionChange:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await get_owned_team(session, owner_id, team_id)
                    if await session.get(Plan, plan_id) is None:
                        raise NotFound("Plan not found")

                    current = await _active_subscription(session, team_id, for_update=True)
                    if current is not None and current.plan_id == plan_id:
                        raise BadRequest("Team is already subscribed to this plan")

                    subscription, order = await self._switch(session, team_id, plan_id, current)
        except IntegrityError:
            logger.warning(f"Concurrent subscription change rejected for team {team_id}")
            raise BadRequest("Another subscription change is in progress for this team")

        logger.info(f"Team {team_id} subscribed to plan {plan_id} (subscription {subscription.id})")
        return SubscriptionChange(subscription=subscription, order=order)

    async def upgrade(
        self,
        owner_id: int,
        team_id: int,
        new_plan_id: int,
        days_remaining: int,
    ) -> SubscriptionChange:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await get_owned_team(session, owner_id, team_id)

                    current = await _active_subscription(session, team_id, for_update=True)
                    if current is None:
                        raise BadRequest("Team has no active subscription")

                    prorated_price = await self.plans.prorated_upgrade_price(
                        current.plan_id, new_plan_id, days_remaining
                    )
                    subscription, order = await self._switch(session, team_id, new_plan_id, current)
        except IntegrityError:
            logger.warning(f"Concurrent subscription change rejected for team {team_id}")
            raise BadRequest("Another subscription change is in progress for this team")

        logger.info(
            f"Team {team_id} upgraded to plan {new_plan_id}, prorated price {prorated_price}"
        )
        return SubscriptionChange(subscription=subscription, order=order, prorated_price=prorated_price)

    async def cancel(self, owner_id: int, team_id: int) -> Subscription:
        async with self.session_factory() as session:
            async with session.begin():
                await get_owned_team(session, owner_id, team_id)

                current = await _active_subscription(session, team_id, for_update=True)
                if current is None:
                    raise BadRequest("Team has no active subscription")

                current.deactivate()
                session.add(current)

        logger.info(f"Team {team_id} cancelled subscription {current.id}")
        return current

    async def active(self, owner_id: int, team_id: int) -> Subscription:
        async with self.session_factory() as session:
            await get_owned_team(session, owner_id, team_id)
            subscription = await _active_subscription(session, team_id)
            if subscription is None:
                raise NotFound("No active subscription")
            return subscription

    async def history(self, owner_id: int, team_id: int) -> List[Subscription]:
        async with self.session_factory() as session:
            await get_owned_team(session, owner_id, team_id)
            result = await session.exec(
                select(Subscription)
                .where(Subscription.team_id == team_id)
                .order_by(Subscription.id.desc())
            )
            return list(result.all())

    async def orders(self, owner_id: int, team_id: int) -> List[Order]:
        async with self.session_factory() as session:
            await get_owned_team(session, owner_id, team_id)
            result = await session.exec(
                select(Order)
                .join(Subscription, Order.subscription_id == Subscription.id)
                .where(Subscription.team_id == team_id)
                .order_by(Order.id.desc())
            )
            return list(result.all())

    async def mark_paid(self, order_id: int) -> Order:
        async with self.session_factory() as session:
            async with session.begin():
                order = await session.get(Order, order_id)
                if order is None:
                    raise NotFound("Order not found")

                try:
                    order.mark_paid()
                except ValueError as e:
                    raise BadRequest(str(e))
                session.add(order)

        logger.info(f"Order {order_id} marked paid")
        return order

    async def open_billing_cycle(self) -> int:
        """Open one unpaid order for every active subscription"""
        async with self.session_factory() as session:
            async with session.begin():
                result = await session.exec(
                    select(Subscription).where(Subscription.is_active == True)  # noqa: E712
                )
                subscriptions = result.all()
                for subscription in subscriptions:
                    session.add(Order(subscription_id=subscription.id))

        logger.info(f"Opened billing cycle for {len(subscriptions)} subscriptions")
        return len(subscriptions)


class SubscriptionProcedures:
    """Subscription and order operations behind their access gates"""

    def __init__(self, guard: AccessGuard, subscriptions: SubscriptionService):
        self.subscriptions = subscriptions

        self.activate = guard.protect(Access.AUTHENTICATED)(self._activate)
        self.upgrade = guard.protect(Access.AUTHENTICATED)(self._upgrade)
        self.cancel = guard.protect(Access.AUTHENTICATED)(self._cancel)
        self.active = guard.protect(Access.AUTHENTICATED)(self._active)
        self.history = guard.protect(Access.AUTHENTICATED)(self._history)
        self.orders = guard.protect(Access.AUTHENTICATED)(self._orders)
        self.mark_paid = guard.protect(Access.ADMIN)(self._mark_paid)

    async def _activate(self, user: AuthenticatedUser, team_id: int, plan_id: int) -> SubscriptionChange:
        return await self.subscriptions.activate(user.user_id, team_id, plan_id)

    async def _upgrade(
        self,
        user: AuthenticatedUser,
        team_id: int,
        new_plan_id: int,
        days_remaining: int,
    ) -> SubscriptionChange:
        return await self.subscriptions.upgrade(user.user_id, team_id, new_plan_id, days_remaining)

    async def _cancel(self, user: AuthenticatedUser, team_id: int) -> Subscription:
        return await self.subscriptions.cancel(user.user_id, team_id)

    async def _active(self, user: AuthenticatedUser, team_id: int) -> Subscription:
        return await self.subscriptions.active(user.user_id, team_id)

    async def _history(self, user: AuthenticatedUser, team_id: int) -> List[Subscription]:
        return await self.subscriptions.history(user.user_id, team_id)

    async def _orders(self, user: AuthenticatedUser, team_id: int) -> List[Order]:
        return await self.subscriptions.orders(user.user_id, team_id)

    async def _mark_paid(self, user: AuthenticatedUser, order_id: int) -> Order:
        order = await self.subscriptions.mark_paid(order_id)
        logger.info(f"Order {order_id} payment recorded by admin {user.user_id}")
        return order
