"""Reporting module for SalesCRM.

Printable customer and transaction reports in HTML, CSV and PDF.
"""

from salescrm.reporting.builder import build_customer_transaction_report
from salescrm.reporting.csv_export import export_customers_csv, export_transactions_csv
from salescrm.reporting.pdf_export import export_customers_pdf, export_transactions_pdf

__all__ = [
    "build_customer_transaction_report",
    "export_customers_csv",
    "export_transactions_csv",
    "export_customers_pdf",
    "export_transactions_pdf",
]
