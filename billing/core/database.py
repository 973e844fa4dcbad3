"""
Database configuration and session management
"""

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
import structlog

from billing.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def async_database_url(database_url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver"""
    return database_url.replace("postgresql://", "postgresql+asyncpg://")


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for the configured database"""
    engine = create_async_engine(
        async_database_url(database_url),
        echo=echo,
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# Create async engine
async_engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create async session factory
async_session_maker = create_session_maker(async_engine)


async def init_db(engine: AsyncEngine = async_engine):
    """Initialize database tables"""
    import billing.models  # noqa: F401  registers every table on the metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created")
