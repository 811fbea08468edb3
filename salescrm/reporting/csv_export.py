"""CSV export of the customer list and customer transaction reports."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from io import StringIO

from salescrm.models import Customer, CustomerTransactionReport
from salescrm.reporting.formatting import or_missing

CUSTOMER_HEADERS = ["Customer ID", "Customer Name", "Address", "Payment Terms"]
TRANSACTION_HEADERS = ["Transaction No", "Date", "Total"]
DETAIL_HEADERS = ["Transaction No", "Product Code", "Description", "Quantity", "Unit Price", "Subtotal"]


def export_customers_csv(customers: Iterable[Customer]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CUSTOMER_HEADERS)

    for customer in customers:
        writer.writerow(
            [
                customer.custno,
                customer.custname,
                or_missing(customer.address),
                or_missing(customer.payterm),
            ]
        )

    return output.getvalue()


def export_transactions_csv(report: CustomerTransactionReport, include_details: bool = False) -> str:
    """Transaction totals, optionally followed by the line-item breakdown.

    Dates are ISO formatted and amounts plain decimals so the file loads
    cleanly into spreadsheets.
    """
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(TRANSACTION_HEADERS)

    for transaction in report.transactions:
        writer.writerow(
            [
                transaction.transno,
                transaction.salesdate.isoformat() if transaction.salesdate else "",
                f"{transaction.total_sales:.2f}",
            ]
        )

    if include_details and report.details:
        writer.writerow([])
        writer.writerow(DETAIL_HEADERS)
        for transaction in report.transactions:
            for line in report.details.get(transaction.transno, []):
                writer.writerow(
                    [
                        transaction.transno,
                        line.prodcode,
                        line.description,
                        line.quantity,
                        f"{line.unitprice:.2f}",
                        f"{line.subtotal:.2f}",
                    ]
                )

    return output.getvalue()
