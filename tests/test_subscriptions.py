"""
Tests for the subscription lifecycle, team ownership and storage constraints
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlmodel import func, select

from billing.core.errors import BadRequest, NotFound, Unauthorized
from billing.models.order import Order
from billing.models.subscription import Subscription
from billing.models.subscription_activation import SubscriptionActivation
from billing.models.team import Team
from billing.repositories.plans import PlanRepository
from billing.services.plans import PlanRegistry
from billing.services.subscriptions import SubscriptionService
from billing.services.teams import TeamService

pytestmark = pytest.mark.asyncio


@pytest.fixture
def subscriptions(session_factory):
    return SubscriptionService(session_factory, PlanRegistry(PlanRepository(session_factory)))


@pytest.fixture
def teams(session_factory):
    return TeamService(session_factory)


async def active_count(session_factory, team_id: int) -> int:
    async with session_factory() as session:
        result = await session.exec(
            select(func.count())
            .select_from(Subscription)
            .where(Subscription.team_id == team_id, Subscription.is_active == True)  # noqa: E712
        )
        return result.one()


async def activation_count(session_factory, subscription_id: int) -> int:
    async with session_factory() as session:
        result = await session.exec(
            select(func.count())
            .select_from(SubscriptionActivation)
            .where(SubscriptionActivation.subscription_id == subscription_id)
        )
        return result.one()


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------

async def test_create_and_list_teams(teams, regular_user, other_user):
    first = await teams.create(regular_user.id, "Acme")
    await teams.create(other_user.id, "Globex")
    second = await teams.create(regular_user.id, "Acme Labs")

    owned = await teams.list(regular_user.id)
    assert [team.id for team in owned] == [first.id, second.id]


async def test_one_personal_team_per_user(teams, regular_user):
    await teams.create(regular_user.id, "Me", is_personal=True)

    with pytest.raises(BadRequest, match="personal team"):
        await teams.create(regular_user.id, "Also me", is_personal=True)


async def test_team_for_unknown_user(teams):
    with pytest.raises(NotFound):
        await teams.create(999, "Nobody's")


async def test_other_users_team_reads_as_missing(teams, team, other_user):
    with pytest.raises(NotFound) as exc_info:
        await teams.read(other_user.id, team.id)
    assert exc_info.value.detail == "Team not found"


async def test_team_procedures_require_login(services, anonymous_ctx):
    with pytest.raises(Unauthorized):
        await services.teams.list(anonymous_ctx)


async def test_team_procedures_scope_to_caller(services, user_ctx, regular_user):
    team = await services.teams.create(user_ctx, "Acme")

    assert team.user_id == regular_user.id
    assert [t.id for t in await services.teams.list(user_ctx)] == [team.id]


# ---------------------------------------------------------------------------
# Activation
# ---------------------------------------------------------------------------

async def test_activate_opens_order_and_activation(subscriptions, session_factory, regular_user, team, basic_plan):
    change = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    assert change.subscription.is_active is True
    assert change.subscription.plan_id == basic_plan.id
    assert change.order.subscription_id == change.subscription.id
    assert change.order.paid is False
    assert change.prorated_price is None
    assert await activation_count(session_factory, change.subscription.id) == 1


async def test_switching_plans_keeps_one_active(subscriptions, session_factory, regular_user, team, basic_plan, premium_plan):
    first = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)
    second = await subscriptions.activate(regular_user.id, team.id, premium_plan.id)

    assert await active_count(session_factory, team.id) == 1
    active = await subscriptions.active(regular_user.id, team.id)
    assert active.id == second.subscription.id

    history = await subscriptions.history(regular_user.id, team.id)
    assert [s.id for s in history] == [second.subscription.id, first.subscription.id]
    assert history[1].is_active is False


async def test_activating_current_plan_rejected(subscriptions, regular_user, team, basic_plan):
    await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    with pytest.raises(BadRequest, match="already subscribed"):
        await subscriptions.activate(regular_user.id, team.id, basic_plan.id)


async def test_reactivation_reuses_subscription(subscriptions, session_factory, regular_user, team, basic_plan, premium_plan):
    original = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)
    await subscriptions.activate(regular_user.id, team.id, premium_plan.id)
    again = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    assert again.subscription.id == original.subscription.id
    assert await activation_count(session_factory, original.subscription.id) == 2
    assert await active_count(session_factory, team.id) == 1


async def test_activate_unknown_plan(subscriptions, regular_user, team):
    with pytest.raises(NotFound, match="Plan not found"):
        await subscriptions.activate(regular_user.id, team.id, 999)


async def test_activate_on_other_users_team(subscriptions, other_user, team, basic_plan, session_factory):
    with pytest.raises(NotFound, match="Team not found"):
        await subscriptions.activate(other_user.id, team.id, basic_plan.id)
    assert await active_count(session_factory, team.id) == 0


# ---------------------------------------------------------------------------
# Upgrade and cancel
# ---------------------------------------------------------------------------

async def test_upgrade_charges_prorated_difference(subscriptions, regular_user, team, basic_plan, premium_plan):
    await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    change = await subscriptions.upgrade(regular_user.id, team.id, premium_plan.id, 15)

    assert change.prorated_price == (300 - 100) / 30 * 15
    assert change.subscription.plan_id == premium_plan.id
    active = await subscriptions.active(regular_user.id, team.id)
    assert active.plan_id == premium_plan.id


async def test_downgrade_through_upgrade_rejected(subscriptions, regular_user, team, basic_plan, premium_plan):
    await subscriptions.activate(regular_user.id, team.id, premium_plan.id)

    with pytest.raises(BadRequest):
        await subscriptions.upgrade(regular_user.id, team.id, basic_plan.id, 10)

    active = await subscriptions.active(regular_user.id, team.id)
    assert active.plan_id == premium_plan.id


async def test_upgrade_with_negative_days_rejected(subscriptions, regular_user, team, basic_plan, premium_plan):
    await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    with pytest.raises(BadRequest, match="Remaining days should not be negative"):
        await subscriptions.upgrade(regular_user.id, team.id, premium_plan.id, -1)


async def test_upgrade_without_active_subscription(subscriptions, regular_user, team, premium_plan):
    with pytest.raises(BadRequest, match="no active subscription"):
        await subscriptions.upgrade(regular_user.id, team.id, premium_plan.id, 10)


async def test_cancel(subscriptions, session_factory, regular_user, team, basic_plan):
    change = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    cancelled = await subscriptions.cancel(regular_user.id, team.id)

    assert cancelled.id == change.subscription.id
    assert cancelled.is_active is False
    assert await active_count(session_factory, team.id) == 0
    with pytest.raises(NotFound, match="No active subscription"):
        await subscriptions.active(regular_user.id, team.id)
    with pytest.raises(BadRequest):
        await subscriptions.cancel(regular_user.id, team.id)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

async def test_orders_span_all_team_subscriptions(subscriptions, regular_user, team, basic_plan, premium_plan):
    first = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)
    second = await subscriptions.upgrade(regular_user.id, team.id, premium_plan.id, 20)

    orders = await subscriptions.orders(regular_user.id, team.id)

    assert [o.id for o in orders] == [second.order.id, first.order.id]


async def test_mark_paid_once(subscriptions, regular_user, team, basic_plan):
    change = await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    order = await subscriptions.mark_paid(change.order.id)
    assert order.paid is True

    with pytest.raises(BadRequest) as exc_info:
        await subscriptions.mark_paid(change.order.id)
    assert exc_info.value.detail == "Order is already paid"


async def test_mark_paid_unknown_order(subscriptions):
    with pytest.raises(NotFound, match="Order not found"):
        await subscriptions.mark_paid(999)


async def test_mark_paid_requires_admin(services, user_ctx, admin_ctx, team, basic_plan):
    change = await services.subscriptions.activate(user_ctx, team.id, basic_plan.id)

    with pytest.raises(Unauthorized):
        await services.subscriptions.mark_paid(user_ctx, change.order.id)

    order = await services.subscriptions.mark_paid(admin_ctx, change.order.id)
    assert order.paid is True


async def test_open_billing_cycle(subscriptions, session_factory, regular_user, other_user, team, basic_plan, teams):
    other_team = await teams.create(other_user.id, "Globex")
    idle_team = await teams.create(other_user.id, "Idle")
    await subscriptions.activate(regular_user.id, team.id, basic_plan.id)
    await subscriptions.activate(other_user.id, other_team.id, basic_plan.id)

    assert await subscriptions.open_billing_cycle() == 2

    assert len(await subscriptions.orders(regular_user.id, team.id)) == 2
    assert len(await subscriptions.orders(other_user.id, other_team.id)) == 2
    assert await subscriptions.orders(other_user.id, idle_team.id) == []


# ---------------------------------------------------------------------------
# Storage constraints
# ---------------------------------------------------------------------------

async def test_second_active_row_rejected_by_index(session_factory, team, basic_plan, premium_plan):
    async with session_factory() as session:
        session.add(Subscription(team_id=team.id, plan_id=basic_plan.id))
        await session.commit()

    with pytest.raises(IntegrityError):
        async with session_factory() as session:
            session.add(Subscription(team_id=team.id, plan_id=premium_plan.id))
            await session.commit()


async def test_referenced_plan_cannot_be_deleted(session_factory, subscriptions, regular_user, team, basic_plan):
    await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    with pytest.raises(IntegrityError):
        async with session_factory() as session:
            await session.execute(text("DELETE FROM plans WHERE id = :id"), {"id": basic_plan.id})
            await session.commit()


async def test_order_requires_existing_subscription(session_factory):
    with pytest.raises(IntegrityError):
        async with session_factory() as session:
            session.add(Order(subscription_id=12345))
            await session.commit()


class CompetingWriterService(SubscriptionService):
    """Another writer activates a subscription for the team after the active row was read"""

    def __init__(self, session_factory, plans, competing_plan_id):
        super().__init__(session_factory, plans)
        self.competing_plan_id = competing_plan_id

    async def _switch(self, session, team_id, plan_id, current):
        session.add(Subscription(team_id=team_id, plan_id=self.competing_plan_id))
        await session.flush()
        return await super()._switch(session, team_id, plan_id, current)


@pytest.fixture
def competing_subscriptions(session_factory, premium_plan):
    return CompetingWriterService(
        session_factory,
        PlanRegistry(PlanRepository(session_factory)),
        competing_plan_id=premium_plan.id,
    )


async def test_concurrent_activation_rejected(competing_subscriptions, session_factory, regular_user, team, basic_plan):
    with pytest.raises(BadRequest) as exc_info:
        await competing_subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    assert exc_info.value.detail == "Another subscription change is in progress for this team"
    # Whole change rolled back
    assert await active_count(session_factory, team.id) == 0


async def test_concurrent_upgrade_rejected(competing_subscriptions, subscriptions, session_factory, regular_user, team, basic_plan, premium_plan):
    await subscriptions.activate(regular_user.id, team.id, basic_plan.id)

    with pytest.raises(BadRequest) as exc_info:
        await competing_subscriptions.upgrade(regular_user.id, team.id, premium_plan.id, 10)

    assert exc_info.value.detail == "Another subscription change is in progress for this team"
    active = await subscriptions.active(regular_user.id, team.id)
    assert active.plan_id == basic_plan.id


async def test_second_personal_team_rejected_by_index(session_factory, regular_user):
    async with session_factory() as session:
        session.add(Team(name="Me", is_personal=True, user_id=regular_user.id))
        await session.commit()

    with pytest.raises(IntegrityError):
        async with session_factory() as session:
            session.add(Team(name="Also me", is_personal=True, user_id=regular_user.id))
            await session.commit()


async def test_shared_teams_not_limited_by_personal_index(teams, regular_user):
    await teams.create(regular_user.id, "Me", is_personal=True)
    await teams.create(regular_user.id, "Acme")
    await teams.create(regular_user.id, "Acme Labs")

    assert len(await teams.list(regular_user.id)) == 3
