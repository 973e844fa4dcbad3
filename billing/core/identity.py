"""
Identity verification: turns request credentials into a verified user id
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from fastapi import Response

from billing.core.auth import verify_token
from billing.core.config import get_settings

settings = get_settings()


class IdentityError(Exception):
    """Raised when credentials do not identify a user"""


@dataclass(frozen=True)
class Credentials:
    """Raw credentials presented by a caller"""
    bearer_token: Optional[str] = None
    session_token: Optional[str] = None


class IdentityVerifier(Protocol):
    async def verify(self, credentials: Credentials) -> int:
        ...


class TokenIdentityVerifier:
    """Verifies the JWT access token from the bearer header or session cookie"""

    async def verify(self, credentials: Credentials) -> int:
        token = credentials.bearer_token or credentials.session_token
        if not token:
            raise IdentityError("Missing access token")

        user_id = verify_token(token)
        if user_id is None:
            raise IdentityError("Invalid access token")
        return user_id


def clear_session(response: Response) -> None:
    """Expire the session cookie on the outgoing response"""
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
