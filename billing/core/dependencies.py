"""
Request-scoped dependencies for FastAPI
"""

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from typing import Optional

from billing.core.config import get_settings
from billing.core.guards import Access, CallContext
from billing.core.identity import Credentials
from billing.services.container import Services

settings = get_settings()

# Missing credentials are reported by the gates, not by the schemes
bearer_security = HTTPBearer(auto_error=False)
session_security = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_credentials(
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_security),
    session_token: Optional[str] = Depends(session_security),
) -> Credentials:
    return Credentials(
        bearer_token=bearer.credentials if bearer is not None else None,
        session_token=session_token,
    )


def get_call_context(
    request: Request,
    credentials: Credentials = Depends(get_credentials),
) -> CallContext:
    """Wrap the request credentials; a failed login check flags the session for clearing"""

    def flag_session_for_clearing() -> None:
        request.state.clear_session = True

    return CallContext(credentials=credentials, on_auth_failure=flag_session_for_clearing)


def require(access: Access):
    """Route dependency running a gate before the request body and parameters are validated.

    Returns the call context with the verified user attached, so the gated
    procedure called by the route does not verify again.
    """

    async def gate(
        ctx: CallContext = Depends(get_call_context),
        services: Services = Depends(get_services),
    ) -> CallContext:
        await services.guard.check(access, ctx)
        return ctx

    return gate
