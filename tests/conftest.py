"""
Test configuration for pytest
"""

import os

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from typing import AsyncGenerator, Dict

from billing.core.auth import create_access_token
from billing.core.database import create_engine, create_session_maker, init_db
from billing.core.guards import CallContext
from billing.core.identity import Credentials
from billing.main import create_app
from billing.models.plan import Plan
from billing.models.team import Team
from billing.models.user import User
from billing.services.container import Services, build_services


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Fresh SQLite database file for each test"""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'billing.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return create_session_maker(engine)


async def _add(session_factory, row):
    async with session_factory() as session:
        session.add(row)
        await session.commit()
        await session.refresh(row)
    return row


@pytest_asyncio.fixture
async def admin_user(session_factory) -> User:
    return await _add(
        session_factory,
        User(email="admin@example.com", name="Admin", is_admin=True),
    )


@pytest_asyncio.fixture
async def regular_user(session_factory) -> User:
    return await _add(
        session_factory,
        User(email="owner@example.com", name="Team Owner", timezone="Europe/Berlin"),
    )


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await _add(session_factory, User(email="other@example.com", name="Other"))


@pytest_asyncio.fixture
async def team(session_factory, regular_user) -> Team:
    return await _add(session_factory, Team(name="Acme", user_id=regular_user.id))


@pytest_asyncio.fixture
async def basic_plan(session_factory) -> Plan:
    return await _add(session_factory, Plan(name="Basic", price=100))


@pytest_asyncio.fixture
async def premium_plan(session_factory) -> Plan:
    return await _add(session_factory, Plan(name="Premium", price=300))


def _context_for(user: User) -> CallContext:
    """Call context carrying a valid bearer token for the user"""
    return CallContext(credentials=Credentials(bearer_token=create_access_token(user.id)))


@pytest.fixture
def admin_ctx(admin_user) -> CallContext:
    return _context_for(admin_user)


@pytest.fixture
def user_ctx(regular_user) -> CallContext:
    return _context_for(regular_user)


@pytest.fixture
def other_ctx(other_user) -> CallContext:
    return _context_for(other_user)


@pytest.fixture
def anonymous_ctx() -> CallContext:
    return CallContext(credentials=Credentials())


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(admin_user.id)}"}


@pytest.fixture
def user_headers(regular_user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(regular_user.id)}"}


@pytest.fixture
def services(session_factory) -> Services:
    return build_services(session_factory)


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app over the test database"""
    app = create_app(session_factory=session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

