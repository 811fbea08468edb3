"""SalesCRM Pydantic models for type-safe data validation.

Money values are ``Decimal`` throughout; derived values (priced lines,
transaction totals) are computed and never stored.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PayTerm(str, Enum):
    """Customer payment terms."""

    COD = "COD"
    NET_30 = "30D"
    NET_45 = "45D"


class UserRole(str, Enum):
    """Role resolved for a logged-in account."""

    ADMIN = "admin"
    CUSTOMER = "customer"
    USER = "user"


class Customer(BaseModel):
    """Customer master record."""

    model_config = ConfigDict(from_attributes=True)

    custno: str
    custname: str
    address: str | None = None
    payterm: str | None = None


class CustomerInput(BaseModel):
    """Fields accepted on customer create/update."""

    custno: str | None = None
    custname: str = ""
    address: str | None = ""
    payterm: PayTerm | None = None

    @field_validator("payterm", mode="before")
    @classmethod
    def blank_payterm_is_none(cls, v):
        return None if v == "" else v


class Sale(BaseModel):
    """Sales transaction header (dashboard feed)."""

    model_config = ConfigDict(from_attributes=True)

    transno: str
    salesdate: date | None = None
    custno: str | None = None
    empno: str | None = None


class Payment(BaseModel):
    """Payment row (dashboard feed)."""

    model_config = ConfigDict(from_attributes=True)

    orno: str
    paydate: date | None = None
    amount: Decimal | None = None
    transno: str | None = None


class PricedLine(BaseModel):
    """Line item after price resolution: subtotal = quantity x unitprice."""

    prodcode: str
    description: str = ""
    quantity: int = 0
    unitprice: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")


class TransactionSummary(BaseModel):
    """One customer transaction with its fully computed total."""

    transno: str
    salesdate: date | None = None
    total_sales: Decimal = Decimal("0")


class TransactionOutcome(BaseModel):
    """Per-transaction result of an isolated aggregation.

    Exactly one of ``total_sales`` / ``error`` is set.
    """

    transno: str
    salesdate: date | None = None
    total_sales: Decimal | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CustomerTransactionReport(BaseModel):
    """Transactions and their line items for one customer (printable report)."""

    customer: Customer
    transactions: list[TransactionSummary] = Field(default_factory=list)
    details: dict[str, list[PricedLine]] = Field(default_factory=dict)

    @property
    def grand_total(self) -> Decimal:
        return sum((t.total_sales for t in self.transactions), Decimal("0"))
