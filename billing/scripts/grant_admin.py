"""
Operator command granting or revoking administrator privileges

Usage:
    python -m billing.scripts.grant_admin user@example.com
    python -m billing.scripts.grant_admin user@example.com --revoke
"""

import argparse
import asyncio
import sys
from typing import Optional

import structlog

from billing.core.database import async_session_maker
from billing.repositories.users import UserRepository

logger = structlog.get_logger(__name__)


async def set_admin_flag(email: str, is_admin: bool, session_factory=async_session_maker) -> bool:
    """Returns False when no user has the email"""
    users = UserRepository(session_factory)
    user = await users.set_admin(email, is_admin)
    if user is None:
        logger.error(f"No user with email {email}")
        return False

    logger.info(f"User {user.id} admin flag set to {user.is_admin}")
    return True


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Grant or revoke administrator privileges")
    parser.add_argument("email", help="Email of the user to change")
    parser.add_argument("--revoke", action="store_true", help="Clear the admin flag instead of setting it")
    args = parser.parse_args(argv)

    if not asyncio.run(set_admin_flag(args.email, not args.revoke)):
        sys.exit(1)


if __name__ == "__main__":
    main()
