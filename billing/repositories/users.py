"""
User store
"""

from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select

from billing.models.columns import utcnow
from billing.models.user import User


class UserRepository:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get(self, user_id: int) -> Optional[User]:
        async with self.session_factory() as session:
            return await session.get(User, user_id)

    async def set_admin(self, email: str, is_admin: bool) -> Optional[User]:
        """Set or clear the admin flag; returns None for an unknown email"""
        async with self.session_factory() as session:
            result = await session.exec(select(User).where(User.email == email))
            user = result.first()
            if user is None:
                return None

            user.is_admin = is_admin
            user.updated_at = utcnow()
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user
