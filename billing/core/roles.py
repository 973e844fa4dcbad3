"""
Role authority backed by the user store
"""

from typing import Optional, Protocol

from billing.models.user import User


class UserStore(Protocol):
    async def get(self, user_id: int) -> Optional[User]:
        ...


class RoleAuthority:
    """Answers whether a user holds administrator privileges"""

    def __init__(self, users: UserStore):
        self.users = users

    async def is_admin(self, user_id: int) -> bool:
        # An unknown user is simply not an admin
        user = await self.users.get(user_id)
        return bool(user is not None and user.is_admin)
