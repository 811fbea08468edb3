"""PDF export for printable customer reports.

Generates reports using ReportLab:
- Customer list (all customer records with a total count)
- Customer transaction history with per-transaction line items
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch, mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from salescrm.config import get_config
from salescrm.models import Customer, CustomerTransactionReport
from salescrm.reporting.formatting import format_currency, format_date, or_missing

# Styles
styles = getSampleStyleSheet()
title_style = ParagraphStyle(
    "CustomTitle",
    parent=styles["Heading1"],
    fontSize=20,
    spaceAfter=20,
    textColor=colors.HexColor("#2d3748"),
)
subtitle_style = ParagraphStyle(
    "CustomSubtitle",
    parent=styles["Heading2"],
    fontSize=13,
    spaceAfter=8,
    textColor=colors.HexColor("#4a5568"),
)
normal_style = ParagraphStyle(
    "CustomNormal",
    parent=styles["Normal"],
    fontSize=10,
    leading=14,
    textColor=colors.HexColor("#2d3748"),
)

HEADER_BACKGROUND = colors.HexColor("#edf2f7")
GRID_COLOR = colors.HexColor("#e2e8f0")


def _table_style(right_align_from: int | None = None) -> TableStyle:
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BACKGROUND),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, GRID_COLOR),
        ("PADDING", (0, 0), (-1, -1), 6),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    if right_align_from is not None:
        commands.append(("ALIGN", (right_align_from, 0), (-1, -1), "RIGHT"))
    return TableStyle(commands)


def _new_document(buffer: BytesIO, title: str) -> SimpleDocTemplate:
    return SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )


def _header(title: str) -> list:
    company = get_config().reports.company_name
    return [
        Paragraph(title, title_style),
        Paragraph(
            f"{escape(company)} - Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}",
            normal_style,
        ),
        Spacer(1, 0.25 * inch),
    ]


def export_customers_pdf(customers: Sequence[Customer]) -> bytes:
    """Customer list report: ID, name, address, payment terms."""
    buffer = BytesIO()
    doc = _new_document(buffer, "Customer Report")
    story = _header("Customer Report")

    if not customers:
        story.append(Paragraph("No customer records found", normal_style))
    else:
        data = [["Customer ID", "Customer Name", "Address", "Payment Terms"]]
        for customer in customers:
            data.append(
                [
                    customer.custno,
                    Paragraph(escape(customer.custname), normal_style),
                    Paragraph(escape(or_missing(customer.address)), normal_style),
                    or_missing(customer.payterm),
                ]
            )
        table = Table(data, colWidths=[1.0 * inch, 2.2 * inch, 2.8 * inch, 1.1 * inch], repeatRows=1)
        table.setStyle(_table_style())
        story.append(table)
        story.append(Spacer(1, 0.2 * inch))
        story.append(Paragraph(f"Total Customers: {len(customers)}", normal_style))

    doc.build(story)
    return buffer.getvalue()


def export_transactions_pdf(report: CustomerTransactionReport) -> bytes:
    """Transaction history for one customer, with line items when present."""
    customer = report.customer
    buffer = BytesIO()
    doc = _new_document(buffer, f"Transactions {customer.custno}")
    story = _header("Customer Transaction Report")

    story.append(Paragraph(escape(f"{customer.custname} ({customer.custno})"), subtitle_style))
    story.append(Paragraph(escape(f"Address: {or_missing(customer.address)}"), normal_style))
    story.append(Paragraph(f"Payment Terms: {or_missing(customer.payterm)}", normal_style))
    story.append(Spacer(1, 0.2 * inch))

    if not report.transactions:
        story.append(Paragraph("No transactions found for this customer", normal_style))
        doc.build(story)
        return buffer.getvalue()

    summary = [["Transaction No", "Date", "Total"]]
    for transaction in report.transactions:
        summary.append(
            [
                transaction.transno,
                format_date(transaction.salesdate),
                format_currency(transaction.total_sales),
            ]
        )
    summary.append(["", "Grand Total", format_currency(report.grand_total)])

    table = Table(summary, colWidths=[2.0 * inch, 2.2 * inch, 2.0 * inch], repeatRows=1)
    style = _table_style(right_align_from=2)
    style.add("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")
    table.setStyle(style)
    story.append(table)

    for transaction in report.transactions:
        lines = report.details.get(transaction.transno)
        if not lines:
            continue

        story.append(Spacer(1, 0.25 * inch))
        story.append(
            Paragraph(
                f"Transaction {transaction.transno} - {format_date(transaction.salesdate)}",
                subtitle_style,
            )
        )
        data = [["Product", "Description", "Qty", "Unit Price", "Subtotal"]]
        for line in lines:
            data.append(
                [
                    line.prodcode,
                    Paragraph(escape(line.description or ""), normal_style),
                    str(line.quantity),
                    format_currency(line.unitprice),
                    format_currency(line.subtotal),
                ]
            )
        data.append(["", "", "", "Total", format_currency(transaction.total_sales)])
        detail_table = Table(
            data, colWidths=[1.0 * inch, 2.6 * inch, 0.6 * inch, 1.2 * inch, 1.2 * inch], repeatRows=1
        )
        detail_style = _table_style(right_align_from=2)
        detail_style.add("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")
        detail_table.setStyle(detail_style)
        story.append(detail_table)

    doc.build(story)
    return buffer.getvalue()
