"""
Team ownership
"""

from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
import structlog

from billing.core.errors import BadRequest, NotFound
from billing.core.guards import Access, AccessGuard, AuthenticatedUser
from billing.models.team import Team
from billing.models.user import User

logger = structlog.get_logger(__name__)


async def get_owned_team(session, owner_id: int, team_id: int) -> Team:
    """Load a team the caller owns; other users' teams read as missing"""
    team = await session.get(Team, team_id)
    if team is None or team.user_id != owner_id:
        raise NotFound("Team not found")
    return team


class TeamService:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def create(self, owner_id: int, name: str, is_personal: bool = False) -> Team:
        async with self.session_factory() as session:
            owner = await session.get(User, owner_id)
            if owner is None:
                raise NotFound("User not found")

            if is_personal:
                result = await session.exec(
                    select(Team).where(Team.user_id == owner_id, Team.is_personal == True)  # noqa: E712
                )
                if result.first() is not None:
                    raise BadRequest("User already has a personal team")

            team = Team(name=name, is_personal=is_personal, user_id=owner_id)
            session.add(team)
            try:
                await session.commit()
            except IntegrityError:
                logger.warning(f"Concurrent personal team creation rejected for user {owner_id}")
                raise BadRequest("User already has a personal team")
            await session.refresh(team)

        logger.info(f"Created team {team.id} for user {owner_id}")
        return team

    async def list(self, owner_id: int) -> List[Team]:
        async with self.session_factory() as session:
            result = await session.exec(
                select(Team).where(Team.user_id == owner_id).order_by(Team.id)
            )
            return list(result.all())

    async def read(self, owner_id: int, team_id: int) -> Team:
        async with self.session_factory() as session:
            return await get_owned_team(session, owner_id, team_id)


class TeamProcedures:
    """Team operations for authenticated callers"""

    def __init__(self, guard: AccessGuard, teams: TeamService):
        self.teams = teams

        self.create = guard.protect(Access.AUTHENTICATED)(self._create)
        self.list = guard.protect(Access.AUTHENTICATED)(self._list)
        self.read = guard.protect(Access.AUTHENTICATED)(self._read)

    async def _create(self, user: AuthenticatedUser, name: str, is_personal: bool = False) -> Team:
        return await self.teams.create(user.user_id, name, is_personal=is_personal)

    async def _list(self, user: AuthenticatedUser) -> List[Team]:
        return await self.teams.list(user.user_id)

    async def _read(self, user: AuthenticatedUser, team_id: int) -> Team:
        return await self.teams.read(user.user_id, team_id)
