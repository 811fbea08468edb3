"""Startup validation for SalesCRM.

Checks configuration and database reachability when the web app starts so
misconfiguration shows up in the logs immediately rather than on the first
request.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.config import get_config
from salescrm.db.connection import get_session
from salescrm.db.models import CustomerModel, PriceHistModel

logger = logging.getLogger(__name__)


class StartupValidationError(Exception):
    """Raised when startup validation fails."""

    pass


def validate_config() -> None:
    """Load configuration, surfacing missing variables as a validation error."""
    try:
        config = get_config()
    except KeyError as e:
        raise StartupValidationError(f"Configuration incomplete: {e}") from e

    if config.aggregation.max_concurrency < 1:
        raise StartupValidationError("AGGREGATION_MAX_CONCURRENCY must be at least 1")

    logger.info("Configuration OK (environment=%s)", config.environment)


async def validate_database_connection(session: AsyncSession) -> None:
    """Verify the schema answers queries.

    Raises:
        StartupValidationError: If the database is unreachable or tables are missing
    """
    try:
        customers = (await session.execute(select(func.count()).select_from(CustomerModel))).scalar()
        prices = (await session.execute(select(func.count()).select_from(PriceHistModel))).scalar()
    except SQLAlchemyError as e:
        raise StartupValidationError(
            f"Database connection failed: {e}. "
            "Check DATABASE_URL and run `salescrm init` to create tables."
        ) from e

    logger.info("Database connection OK (%s customers, %s price history rows)", customers, prices)
    if not prices:
        logger.warning("Price history is empty; every transaction will total 0")


async def run_startup_validation() -> None:
    """Run all startup checks.

    Raises:
        StartupValidationError: On the first failing check
    """
    validate_config()
    async with get_session() as session:
        await validate_database_connection(session)
