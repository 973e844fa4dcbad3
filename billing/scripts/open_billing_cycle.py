"""
Background job opening a new billing cycle

This script should be run once per billing period (e.g., via cron) to open
an unpaid order for every active subscription.
"""

import asyncio
import sys

import structlog

from billing.core.database import async_session_maker
from billing.repositories.plans import PlanRepository
from billing.services.plans import PlanRegistry
from billing.services.subscriptions import SubscriptionService

logger = structlog.get_logger(__name__)


async def open_billing_cycle(session_factory=async_session_maker) -> dict:
    """Open one order per active subscription"""
    service = SubscriptionService(session_factory, PlanRegistry(PlanRepository(session_factory)))
    opened = await service.open_billing_cycle()
    return {"orders_opened": opened}


def main():
    """Main entry point for the billing cycle job"""
    logger.info("Starting billing cycle job")

    try:
        results = asyncio.run(open_billing_cycle())
        logger.info(f"Billing cycle complete: {results}")
    except Exception as e:
        logger.error(f"Fatal error in billing cycle job: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
