"""Request/response models for the SalesCRM JSON API."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from salescrm.models import Customer, Payment, PricedLine, Sale, TransactionOutcome, TransactionSummary


class NextCustomerIdResponse(BaseModel):
    """Used by: GET /api/customers/next-id"""

    custno: str


class TransactionListResponse(BaseModel):
    """Used by: GET /api/customers/{custno}/transactions"""

    custno: str
    transactions: list[TransactionSummary]


class TransactionOutcomeListResponse(BaseModel):
    """Used by: GET /api/customers/{custno}/transactions?isolate=true"""

    custno: str
    outcomes: list[TransactionOutcome]
    failed: int


class TransactionDetailResponse(BaseModel):
    """Used by: GET /api/transactions/{transno}"""

    transno: str
    salesdate: date | None
    lines: list[PricedLine]
    total: Decimal


class DashboardResponse(BaseModel):
    """Used by: GET /api/dashboard"""

    sales: list[Sale]
    payments: list[Payment]


class ProfileResponse(BaseModel):
    """Used by: GET /api/profile"""

    customer: Customer | None
    transactions: list[TransactionSummary]
