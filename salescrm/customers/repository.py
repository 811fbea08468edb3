"""Customer record queries and writes."""

from __future__ import annotations

import logging
import re

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.db.models import CustomerModel, UserCustomerMapModel
from salescrm.exceptions import CustomerNotFoundError, FetchError, RecordValidationError
from salescrm.models import Customer, CustomerInput, PayTerm

logger = logging.getLogger(__name__)

FIRST_CUSTOMER_ID = "C0001"
_CUSTNO_PATTERN = re.compile(r"^C\d+$")


def increment_customer_id(last_id: str | None) -> str:
    """Next ``C####`` code after ``last_id``.

    Falls back to ``C0001`` when there is no previous code or it does not
    follow the ``C<digits>`` pattern.
    """
    if not last_id or not _CUSTNO_PATTERN.match(last_id):
        return FIRST_CUSTOMER_ID
    return f"C{int(last_id[1:]) + 1:04d}"


async def search_customers(session: AsyncSession, query: str | None = None) -> list[Customer]:
    """Customers whose code, name or address contains ``query`` (case-insensitive).

    Without a query every customer is returned. Ordered by name.
    """
    stmt = select(CustomerModel)
    if query:
        stmt = stmt.where(
            or_(
                CustomerModel.custno.icontains(query, autoescape=True),
                CustomerModel.custname.icontains(query, autoescape=True),
                CustomerModel.address.icontains(query, autoescape=True),
            )
        )
    stmt = stmt.order_by(CustomerModel.custname, CustomerModel.custno)

    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch customers") from exc

    return [Customer.model_validate(row) for row in result.scalars().all()]


async def get_all_customers(session: AsyncSession) -> list[Customer]:
    return await search_customers(session)


async def get_customer(session: AsyncSession, custno: str) -> Customer | None:
    try:
        row = await session.get(CustomerModel, custno)
    except SQLAlchemyError as exc:
        raise FetchError("fetch customer", custno) from exc

    return Customer.model_validate(row) if row is not None else None


async def next_customer_id(session: AsyncSession) -> str:
    """Allocate the code following the highest existing customer code.

    Longer codes sort after shorter ones so ``C10000`` follows ``C9999``.
    """
    stmt = (
        select(CustomerModel.custno)
        .order_by(func.length(CustomerModel.custno).desc(), CustomerModel.custno.desc())
        .limit(1)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch last customer id") from exc

    return increment_customer_id(result.scalars().first())


def _require_name(data: CustomerInput) -> str:
    name = (data.custname or "").strip()
    if not name:
        raise RecordValidationError("custname", "Customer Name is required")
    return name


def _payterm_value(payterm: PayTerm | None) -> str | None:
    return payterm.value if payterm is not None else None


async def create_customer(session: AsyncSession, data: CustomerInput) -> Customer:
    """Insert a customer, allocating the next code when none is given.

    Raises:
        RecordValidationError: Missing name or duplicate code
        FetchError: If the write fails
    """
    name = _require_name(data)
    custno = data.custno or await next_customer_id(session)

    row = CustomerModel(
        custno=custno,
        custname=name,
        address=data.address or "",
        payterm=_payterm_value(data.payterm),
    )
    session.add(row)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise RecordValidationError("custno", f"Customer {custno} already exists") from exc
    except SQLAlchemyError as exc:
        raise FetchError("add customer", custno) from exc

    logger.info("Created customer %s", custno)
    return Customer.model_validate(row)


async def update_customer(session: AsyncSession, custno: str, data: CustomerInput) -> Customer:
    """Update name, address and payment terms of an existing customer.

    Raises:
        RecordValidationError: Missing name
        CustomerNotFoundError: Unknown customer code
        FetchError: If the write fails
    """
    name = _require_name(data)

    try:
        row = await session.get(CustomerModel, custno)
    except SQLAlchemyError as exc:
        raise FetchError("fetch customer", custno) from exc
    if row is None:
        raise CustomerNotFoundError(custno)

    row.custname = name
    row.address = data.address or ""
    row.payterm = _payterm_value(data.payterm)
    try:
        await session.flush()
    except SQLAlchemyError as exc:
        raise FetchError("update customer", custno) from exc

    logger.info("Updated customer %s", custno)
    return Customer.model_validate(row)


async def delete_customer(session: AsyncSession, custno: str) -> None:
    """Delete a customer and any account links pointing at it.

    Raises:
        CustomerNotFoundError: Unknown customer code
        FetchError: If the delete fails
    """
    try:
        row = await session.get(CustomerModel, custno)
        if row is None:
            raise CustomerNotFoundError(custno)
        await session.execute(
            delete(UserCustomerMapModel).where(UserCustomerMapModel.customer_id == custno)
        )
        await session.delete(row)
        await session.flush()
    except SQLAlchemyError as exc:
        raise FetchError("delete customer", custno) from exc

    logger.info("Deleted customer %s", custno)
