"""Sales read side: transaction totals and dashboard feeds."""

from salescrm.sales.aggregator import (
    expand_transaction,
    get_transaction_detail,
    list_customer_transactions,
    summarize_customer_transactions,
)
from salescrm.sales.repository import get_recent_payments, get_recent_sales, get_sale

__all__ = [
    "expand_transaction",
    "get_transaction_detail",
    "list_customer_transactions",
    "summarize_customer_transactions",
    "get_recent_sales",
    "get_recent_payments",
    "get_sale",
]
