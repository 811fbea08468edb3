"""Dashboard feeds: latest sales and payments."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.db.models import PaymentModel, SaleModel
from salescrm.exceptions import FetchError
from salescrm.models import Payment, Sale


async def get_recent_sales(session: AsyncSession, limit: int = 10) -> list[Sale]:
    """Most recent sales first."""
    stmt = (
        select(SaleModel)
        .order_by(SaleModel.salesdate.desc(), SaleModel.transno.desc())
        .limit(limit)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch sales") from exc

    return [Sale.model_validate(row) for row in result.scalars().all()]


async def get_recent_payments(session: AsyncSession, limit: int = 10) -> list[Payment]:
    """Most recent payments first."""
    stmt = (
        select(PaymentModel)
        .order_by(PaymentModel.paydate.desc(), PaymentModel.orno.desc())
        .limit(limit)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch payments") from exc

    return [Payment.model_validate(row) for row in result.scalars().all()]


async def get_sale(session: AsyncSession, transno: str) -> Sale | None:
    try:
        row = await session.get(SaleModel, transno)
    except SQLAlchemyError as exc:
        raise FetchError("fetch sale", transno) from exc

    return Sale.model_validate(row) if row is not None else None
