"""
Subscription Billing - Main Application Entry Point
Plans, team subscriptions and prorated upgrades
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import structlog

from sqlalchemy.ext.asyncio import async_sessionmaker

from billing.core.config import get_settings
from billing.core.database import async_session_maker, init_db
from billing.core.errors import BillingError
from billing.core.identity import IdentityVerifier, clear_session
from billing.services.container import build_services
from billing.api import orders, plans, subscriptions, teams

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing billing backend")
    if settings.AUTO_CREATE_TABLES:
        await init_db()
    else:
        logger.info("Database managed by Alembic migrations")

    yield

    # Shutdown
    logger.info("Shutting down billing backend")


async def billing_error_handler(request: Request, exc: BillingError):
    """Render a failure as its kind and message"""
    response = JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
        headers=exc.headers,
    )
    if getattr(request.state, "clear_session", False):
        clear_session(response)
    return response


def create_app(
    session_factory: Optional[async_sessionmaker] = None,
    verifier: Optional[IdentityVerifier] = None,
) -> FastAPI:
    """Create the FastAPI application around a session factory"""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Subscription plans, team subscriptions and prorated upgrades",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = build_services(session_factory or async_session_maker, verifier=verifier)

    # Configure middleware stack
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(BillingError, billing_error_handler)

    # Include routers
    prefix = settings.API_V1_PREFIX
    app.include_router(plans.router, prefix=f"{prefix}/plans", tags=["plans"])
    app.include_router(teams.router, prefix=f"{prefix}/teams", tags=["teams"])
    app.include_router(subscriptions.router, prefix=f"{prefix}/teams", tags=["subscriptions"])
    app.include_router(orders.router, prefix=f"{prefix}/orders", tags=["orders"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "subscription-billing-api"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "billing.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
