"""Account registration, authentication and role lookup."""

from salescrm.accounts.service import (
    authenticate,
    delete_account,
    get_linked_customer,
    landing_path,
    register_user,
    resolve_user_role,
)

__all__ = [
    "authenticate",
    "delete_account",
    "get_linked_customer",
    "landing_path",
    "register_user",
    "resolve_user_role",
]
