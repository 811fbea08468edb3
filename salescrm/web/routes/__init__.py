"""SalesCRM Web Route Modules.

Each module exports a `router` object (APIRouter instance) that
salescrm.web.app includes.

Usage:
    from salescrm.web.routes import auth
    app.include_router(auth.router)
"""

from salescrm.web.routes import (
    auth,
    customers,
    dashboard,
    health,
    profile,
    reports,
    transactions,
)

__all__ = [
    "auth",
    "customers",
    "dashboard",
    "health",
    "profile",
    "reports",
    "transactions",
]
