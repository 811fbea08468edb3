"""Price effectivity queries.

A product's price at a point in time is the price-history row with the
latest ``effdate`` not after that time. Rows sharing an ``effdate`` resolve
to the highest ``id``. No qualifying row means the product was not priced
yet and resolves to zero; that is a normal result, not an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.db.models import PriceHistModel
from salescrm.exceptions import FetchError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


async def resolve_price(
    session: AsyncSession,
    prodcode: str,
    as_of: date,
) -> Decimal:
    """Get the unit price in effect for a product on a given date.

    Args:
        session: Database session
        prodcode: Product code
        as_of: Inclusive upper bound for the effective date

    Returns:
        Unit price of the effective row, or ``Decimal("0")`` if none qualifies

    Raises:
        FetchError: If the query fails
    """
    stmt = (
        select(PriceHistModel.unitprice)
        .where(
            PriceHistModel.prodcode == prodcode,
            PriceHistModel.effdate <= as_of,
        )
        .order_by(PriceHistModel.effdate.desc(), PriceHistModel.id.desc())
        .limit(1)
    )

    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("resolve price", f"{prodcode} as of {as_of}") from exc

    unitprice = result.scalars().first()
    if unitprice is None:
        logger.debug("No price for %s as of %s", prodcode, as_of)
        return ZERO

    return Decimal(unitprice)


async def resolve_prices(
    session: AsyncSession,
    prodcodes: Iterable[str],
    as_of: date,
) -> dict[str, Decimal]:
    """Resolve effective prices for several products in one query.

    Same semantics as :func:`resolve_price` for every code; codes with no
    qualifying row map to zero.

    Raises:
        FetchError: If the query fails
    """
    codes = sorted(set(prodcodes))
    if not codes:
        return {}

    stmt = (
        select(PriceHistModel.prodcode, PriceHistModel.unitprice)
        .where(
            PriceHistModel.prodcode.in_(codes),
            PriceHistModel.effdate <= as_of,
        )
        .order_by(
            PriceHistModel.prodcode,
            PriceHistModel.effdate.desc(),
            PriceHistModel.id.desc(),
        )
    )

    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("resolve prices", f"{len(codes)} products as of {as_of}") from exc

    prices: dict[str, Decimal] = {}
    for row in result.all():
        # Rows arrive newest first within each product
        if row.prodcode not in prices:
            prices[row.prodcode] = Decimal(row.unitprice)

    return {code: prices.get(code, ZERO) for code in codes}


async def get_price_history(
    session: AsyncSession,
    prodcode: str,
    limit: int = 10,
) -> list[PriceHistModel]:
    """Get price change history for a product, most recent first."""
    stmt = (
        select(PriceHistModel)
        .where(PriceHistModel.prodcode == prodcode)
        .order_by(PriceHistModel.effdate.desc(), PriceHistModel.id.desc())
        .limit(limit)
    )

    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("load price history", prodcode) from exc

    return list(result.scalars().all())
