"""Transaction totals from sales, sales detail and price history.

Pipeline (leaf to root):

- ``resolve_price`` (``salescrm.db.price_queries``) finds the unit price in
  effect for a product on a date.
- :func:`expand_transaction` turns a transaction's line items into priced
  lines, resolving every price at the transaction's own sales date.
- :func:`list_customer_transactions` sums each transaction's priced lines
  into ``total_sales``.

The strict functions run sequentially on one session and let the first
``FetchError`` abort the whole call. :func:`summarize_customer_transactions`
expands transactions concurrently, one session each, and reports a failure
per transaction instead of aborting.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.db.models import ProductModel, SaleModel, SalesDetailModel
from salescrm.db.price_queries import ZERO, resolve_price, resolve_prices
from salescrm.exceptions import FetchError
from salescrm.models import PricedLine, TransactionOutcome, TransactionSummary

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncSession]


async def _fetch_line_items(session: AsyncSession, transno: str) -> list:
    """Line items of a transaction in insertion order, with product description."""
    stmt = (
        select(
            SalesDetailModel.prodcode,
            SalesDetailModel.quantity,
            ProductModel.description,
        )
        .outerjoin(ProductModel, ProductModel.prodcode == SalesDetailModel.prodcode)
        .where(SalesDetailModel.transno == transno)
        .order_by(SalesDetailModel.id)
    )

    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch transaction details", transno) from exc

    return list(result.all())


async def _fetch_customer_sales(session: AsyncSession, custno: str) -> list:
    stmt = (
        select(SaleModel.transno, SaleModel.salesdate)
        .where(SaleModel.custno == custno)
        .order_by(SaleModel.salesdate.desc(), SaleModel.transno.desc())
    )

    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch customer transactions", custno) from exc

    return list(result.all())


def _priced_line(row, unitprice: Decimal) -> PricedLine:
    quantity = row.quantity or 0
    return PricedLine(
        prodcode=row.prodcode,
        description=row.description or "",
        quantity=quantity,
        unitprice=unitprice,
        subtotal=quantity * unitprice,
    )


async def expand_transaction(
    session: AsyncSession,
    transno: str,
    as_of: date | None,
) -> list[PricedLine]:
    """Price every line item of a transaction.

    Args:
        session: Database session
        transno: Transaction number
        as_of: Date used for price effectivity (the transaction's sales date).
            ``None`` means the sale is undated and nothing is priced yet.

    Returns:
        One priced line per line item, in fetch order; empty if none

    Raises:
        FetchError: If the line items or any price lookup fail
    """
    rows = await _fetch_line_items(session, transno)

    lines: list[PricedLine] = []
    for row in rows:
        unitprice = ZERO if as_of is None else await resolve_price(session, row.prodcode, as_of)
        lines.append(_priced_line(row, unitprice))

    return lines


async def get_transaction_detail(
    session: AsyncSession,
    transno: str,
    salesdate: date | None,
) -> list[PricedLine]:
    """Per-transaction breakdown for display (description, quantity, price, subtotal)."""
    lines = await expand_transaction(session, transno, salesdate)
    logger.debug("Expanded %s into %d priced lines", transno, len(lines))
    return lines


def transaction_total(lines: list[PricedLine]) -> Decimal:
    return sum((line.subtotal for line in lines), ZERO)


async def _expand_customer_sales(session: AsyncSession, custno: str) -> list:
    """(sale row, priced lines) per transaction, most recent first."""
    sales = await _fetch_customer_sales(session, custno)
    expanded = []
    for sale in sales:
        expanded.append((sale, await expand_transaction(session, sale.transno, sale.salesdate)))
    return expanded


def _summary(sale, lines: list[PricedLine]) -> TransactionSummary:
    return TransactionSummary(
        transno=sale.transno,
        salesdate=sale.salesdate,
        total_sales=transaction_total(lines),
    )


async def list_customer_transactions(
    session: AsyncSession,
    custno: str,
) -> list[TransactionSummary]:
    """List a customer's transactions, most recent first, with totals.

    Raises:
        FetchError: If the sales query or any transaction's expansion fails
    """
    expanded = await _expand_customer_sales(session, custno)
    summaries = [_summary(sale, lines) for sale, lines in expanded]

    logger.info("Listed %d transactions for customer %s", len(summaries), custno)
    return summaries


async def list_customer_transaction_details(
    session: AsyncSession,
    custno: str,
) -> tuple[list[TransactionSummary], dict[str, list[PricedLine]]]:
    """Like :func:`list_customer_transactions`, also returning each breakdown.

    Every transaction is expanded once; its total is the sum of the lines
    returned for it.
    """
    expanded = await _expand_customer_sales(session, custno)
    summaries = [_summary(sale, lines) for sale, lines in expanded]
    details = {sale.transno: lines for sale, lines in expanded}

    logger.info("Listed %d transactions with details for customer %s", len(summaries), custno)
    return summaries, details


async def _batched_total(session: AsyncSession, transno: str, as_of: date | None) -> Decimal:
    """Transaction total with one price query for all of its products."""
    rows = await _fetch_line_items(session, transno)
    if as_of is None:
        prices: dict[str, Decimal] = {}
    else:
        prices = await resolve_prices(session, (row.prodcode for row in rows), as_of)
    return transaction_total([_priced_line(row, prices.get(row.prodcode, ZERO)) for row in rows])


async def summarize_customer_transactions(
    session_factory: SessionFactory,
    custno: str,
    max_concurrency: int = 4,
) -> list[TransactionOutcome]:
    """List a customer's transactions with failures isolated per transaction.

    Transactions are expanded concurrently (at most ``max_concurrency`` at a
    time), each on its own session. A ``FetchError`` while expanding one
    transaction is recorded on that transaction's outcome; the others still
    get their totals. Order matches :func:`list_customer_transactions`.

    Raises:
        FetchError: If the customer's sales themselves cannot be listed
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    async with session_factory() as session:
        sales = await _fetch_customer_sales(session, custno)

    semaphore = asyncio.Semaphore(max_concurrency)

    async def _summarize(transno: str, salesdate: date | None) -> TransactionOutcome:
        async with semaphore:
            try:
                async with session_factory() as session:
                    total = await _batched_total(session, transno, salesdate)
            except FetchError as exc:
                logger.warning("Transaction %s could not be totalled: %s", transno, exc)
                return TransactionOutcome(transno=transno, salesdate=salesdate, error=str(exc))
        return TransactionOutcome(transno=transno, salesdate=salesdate, total_sales=total)

    results = await asyncio.gather(
        *(_summarize(s.transno, s.salesdate) for s in sales), return_exceptions=True
    )
    # FetchError is recorded per outcome; anything else re-raises after all tasks settle
    for result in results:
        if isinstance(result, BaseException):
            raise result
    outcomes: list[TransactionOutcome] = list(results)

    failed = sum(1 for o in outcomes if not o.ok)
    logger.info(
        "Summarized %d transactions for customer %s (%d failed)", len(outcomes), custno, failed
    )
    return outcomes
