"""Customer record management."""

from salescrm.customers.repository import (
    create_customer,
    delete_customer,
    get_all_customers,
    get_customer,
    increment_customer_id,
    next_customer_id,
    search_customers,
    update_customer,
)

__all__ = [
    "create_customer",
    "delete_customer",
    "get_all_customers",
    "get_customer",
    "increment_customer_id",
    "next_customer_id",
    "search_customers",
    "update_customer",
]
