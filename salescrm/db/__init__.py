"""Database layer for SalesCRM with async SQLAlchemy."""

from salescrm.db.connection import get_session, init_db
from salescrm.db.models import (
    AdminModel,
    AppUserModel,
    Base,
    CustomerModel,
    PaymentModel,
    PriceHistModel,
    ProductModel,
    SaleModel,
    SalesDetailModel,
    UserCustomerMapModel,
)

__all__ = [
    "Base",
    "CustomerModel",
    "ProductModel",
    "PriceHistModel",
    "SaleModel",
    "SalesDetailModel",
    "PaymentModel",
    "AppUserModel",
    "AdminModel",
    "UserCustomerMapModel",
    "get_session",
    "init_db",
]
