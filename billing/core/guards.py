"""
Access gates wrapping caller-facing operations

Two gates share one verification step:
- AUTHENTICATED: the credentials must identify a user
- ADMIN: the credentials must identify a user holding the admin flag

A gate runs before the wrapped operation and stops at the first failing step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional
import functools
import structlog

from billing.core.errors import Unauthorized
from billing.core.identity import Credentials, IdentityVerifier
from billing.core.roles import RoleAuthority

logger = structlog.get_logger(__name__)


class Access(str, Enum):
    """Capability a gate requires"""
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


@dataclass
class AuthenticatedUser:
    """Verified identity attached to a call"""
    user_id: int
    is_admin: bool = False


@dataclass
class CallContext:
    """Per-call state handed through the gates"""
    credentials: Credentials
    on_auth_failure: Optional[Callable[[], None]] = None
    user: Optional[AuthenticatedUser] = None


class AccessGuard:
    """Verifies identity and role before an operation runs"""

    def __init__(self, verifier: IdentityVerifier, roles: RoleAuthority):
        self.verifier = verifier
        self.roles = roles

    async def authenticate(self, ctx: CallContext) -> AuthenticatedUser:
        try:
            user_id = await self.verifier.verify(ctx.credentials)
        except Exception as e:
            logger.debug(f"Authentication failed: {e}")
            if ctx.on_auth_failure is not None:
                ctx.on_auth_failure()
            raise Unauthorized() from None

        ctx.user = AuthenticatedUser(user_id=user_id)
        return ctx.user

    async def authorize_admin(self, ctx: CallContext) -> AuthenticatedUser:
        # Every failure in here, including a store error, leaves as a bare Unauthorized
        try:
            user_id = await self.verifier.verify(ctx.credentials)
            if not await self.roles.is_admin(user_id):
                raise Unauthorized("Admins only")
        except Exception as e:
            logger.info(f"Admin check rejected: {e!r}")
            raise Unauthorized() from None

        ctx.user = AuthenticatedUser(user_id=user_id, is_admin=True)
        return ctx.user

    async def check(self, access: Access, ctx: CallContext) -> AuthenticatedUser:
        # A context already verified for this capability is not verified again
        if ctx.user is not None and (access is Access.AUTHENTICATED or ctx.user.is_admin):
            return ctx.user

        if access is Access.ADMIN:
            return await self.authorize_admin(ctx)
        return await self.authenticate(ctx)

    def protect(self, access: Access):
        """Wrap an operation so it only runs behind the given gate.

        The wrapped callable takes the CallContext first; the operation itself
        receives the verified AuthenticatedUser in its place.
        """
        def decorator(operation: Callable[..., Awaitable]):
            @functools.wraps(operation)
            async def gated(ctx: CallContext, *args, **kwargs):
                user = await self.check(access, ctx)
                return await operation(user, *args, **kwargs)
            return gated
        return decorator
