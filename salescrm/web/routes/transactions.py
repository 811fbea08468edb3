"""Transaction history API.

Routes:
- GET /api/customers/{custno}/transactions  - Totals per transaction (?isolate=true
                                              for per-transaction failure reporting)
- GET /api/transactions/{transno}           - Priced line items (?salesdate=)
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from salescrm.config import get_config
from salescrm.db.connection import get_session, get_session_factory
from salescrm.sales.aggregator import (
    get_transaction_detail,
    list_customer_transactions,
    summarize_customer_transactions,
    transaction_total,
)
from salescrm.sales.repository import get_sale
from salescrm.web.auth import ensure_customer_access, require_auth
from salescrm.web.models import (
    TransactionDetailResponse,
    TransactionListResponse,
    TransactionOutcomeListResponse,
)

router = APIRouter(prefix="/api", tags=["transactions"])


@router.get(
    "/customers/{custno}/transactions",
    response_model=TransactionListResponse | TransactionOutcomeListResponse,
)
async def customer_transactions(
    custno: str,
    isolate: bool = Query(False),
    user: dict = Depends(require_auth),
):
    """Transactions for a customer, most recent first."""
    ensure_customer_access(user, custno)

    if isolate:
        outcomes = await summarize_customer_transactions(
            get_session_factory(),
            custno,
            max_concurrency=get_config().aggregation.max_concurrency,
        )
        return TransactionOutcomeListResponse(
            custno=custno,
            outcomes=outcomes,
            failed=sum(1 for o in outcomes if not o.ok),
        )

    async with get_session() as session:
        transactions = await list_customer_transactions(session, custno)
    return TransactionListResponse(custno=custno, transactions=transactions)


@router.get("/transactions/{transno}", response_model=TransactionDetailResponse)
async def transaction_detail(
    transno: str,
    salesdate: date | None = Query(None, description="Defaults to the sale's own date"),
    user: dict = Depends(require_auth),
):
    """Line-item breakdown of one transaction."""
    async with get_session() as session:
        sale = await get_sale(session, transno)
        if sale is None:
            raise HTTPException(status_code=404, detail="Transaction not found")
        ensure_customer_access(user, sale.custno or "")

        as_of = salesdate or sale.salesdate
        lines = await get_transaction_detail(session, transno, as_of)

    return TransactionDetailResponse(
        transno=transno,
        salesdate=as_of,
        lines=lines,
        total=transaction_total(lines),
    )
