"""Assemble report data from the customer and sales layers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.customers.repository import get_customer
from salescrm.exceptions import CustomerNotFoundError
from salescrm.models import CustomerTransactionReport
from salescrm.sales.aggregator import list_customer_transaction_details, list_customer_transactions


async def build_customer_transaction_report(
    session: AsyncSession,
    custno: str,
    include_details: bool = True,
) -> CustomerTransactionReport:
    """Customer header, transaction totals and (optionally) each breakdown.

    Raises:
        CustomerNotFoundError: Unknown customer code
        FetchError: If any read fails
    """
    customer = await get_customer(session, custno)
    if customer is None:
        raise CustomerNotFoundError(custno)

    if include_details:
        transactions, details = await list_customer_transaction_details(session, custno)
    else:
        transactions, details = await list_customer_transactions(session, custno), {}

    return CustomerTransactionReport(
        customer=customer,
        transactions=transactions,
        details=details,
    )
