"""Printable report routes.

Routes:
- GET /reports/customers                          - Customer list (html|csv|pdf)
- GET /reports/customers/{custno}/transactions    - Customer transaction report (html|csv|pdf)
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request, Response

from salescrm.customers.repository import get_all_customers
from salescrm.db.connection import get_session
from salescrm.reporting.builder import build_customer_transaction_report
from salescrm.reporting.csv_export import export_customers_csv, export_transactions_csv
from salescrm.reporting.pdf_export import export_customers_pdf, export_transactions_pdf
from salescrm.web.auth import ensure_customer_access, require_admin, require_auth
from salescrm.web.dependencies import get_templates

router = APIRouter(prefix="/reports", tags=["reports"])

FORMAT_PATTERN = "^(html|csv|pdf)$"


def _download(content: str | bytes, media_type: str, stem: str, extension: str) -> Response:
    filename = f"{stem}_{datetime.now().strftime('%Y%m%d')}.{extension}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/customers")
async def customer_report(
    request: Request,
    format: str = Query("html", pattern=FORMAT_PATTERN),
    user: dict = Depends(require_admin),
    templates=Depends(get_templates),
):
    """All customer records with payment terms."""
    async with get_session() as session:
        customers = await get_all_customers(session)

    if format == "csv":
        return _download(export_customers_csv(customers), "text/csv", "customers", "csv")
    if format == "pdf":
        return _download(export_customers_pdf(customers), "application/pdf", "customers", "pdf")

    return templates.TemplateResponse(
        request,
        "customer_report.html",
        {"customers": customers, "user": user},
    )


@router.get("/customers/{custno}/transactions")
async def customer_transaction_report(
    request: Request,
    custno: str,
    format: str = Query("html", pattern=FORMAT_PATTERN),
    details: bool = Query(True),
    user: dict = Depends(require_auth),
    templates=Depends(get_templates),
):
    """Transactions for one customer with line-item breakdowns."""
    ensure_customer_access(user, custno)

    async with get_session() as session:
        report = await build_customer_transaction_report(session, custno, include_details=details)

    stem = f"transactions_{custno}"
    if format == "csv":
        return _download(
            export_transactions_csv(report, include_details=details), "text/csv", stem, "csv"
        )
    if format == "pdf":
        return _download(export_transactions_pdf(report), "application/pdf", stem, "pdf")

    return templates.TemplateResponse(
        request,
        "transaction_report.html",
        {"report": report, "user": user},
    )
