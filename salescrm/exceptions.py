"""Error taxonomy shared by the query layer, services and web routes."""

from __future__ import annotations


class SalesCRMError(Exception):
    """Base class for application errors."""


class FetchError(SalesCRMError):
    """The data source failed to answer a read or write.

    Wraps the underlying driver/SQLAlchemy exception (available as
    ``__cause__``). Always propagated to the caller; never retried.
    """

    def __init__(self, operation: str, detail: str | None = None):
        self.operation = operation
        self.detail = detail
        message = f"Failed to {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RecordValidationError(SalesCRMError):
    """A write was rejected because a required field is missing or invalid."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class CustomerNotFoundError(SalesCRMError):
    """No customer row exists for the given customer code."""

    def __init__(self, custno: str):
        self.custno = custno
        super().__init__(f"Customer {custno} not found")
