"""
Builds the service graph around one session factory
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from billing.core.guards import AccessGuard
from billing.core.identity import IdentityVerifier, TokenIdentityVerifier
from billing.core.roles import RoleAuthority
from billing.repositories.plans import PlanRepository
from billing.repositories.users import UserRepository
from billing.services.plans import PlanProcedures, PlanRegistry
from billing.services.subscriptions import SubscriptionProcedures, SubscriptionService
from billing.services.teams import TeamProcedures, TeamService


@dataclass
class Services:
    guard: AccessGuard
    plans: PlanProcedures
    teams: TeamProcedures
    subscriptions: SubscriptionProcedures


def build_services(
    session_factory: async_sessionmaker,
    verifier: Optional[IdentityVerifier] = None,
) -> Services:
    guard = AccessGuard(
        verifier=verifier or TokenIdentityVerifier(),
        roles=RoleAuthority(UserRepository(session_factory)),
    )
    registry = PlanRegistry(PlanRepository(session_factory))

    return Services(
        guard=guard,
        plans=PlanProcedures(guard, registry),
        teams=TeamProcedures(guard, TeamService(session_factory)),
        subscriptions=SubscriptionProcedures(
            guard, SubscriptionService(session_factory, registry)
        ),
    )
