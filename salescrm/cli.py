"""SalesCRM CLI.

Commands:
- init: Initialize database schema
- customers: List or search customer records
- next-id: Show the next free customer code
- transactions: List a customer's transactions with totals
- detail: Show the priced line items of one transaction
- report: Export the customer list or a transaction report (CSV/PDF)
- create-user: Create an account (the only way to create admins)
- web serve: Run the web app
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from salescrm.accounts.service import register_user
from salescrm.config import get_config
from salescrm.core.logging import configure_logging
from salescrm.customers.repository import next_customer_id, search_customers
from salescrm.db.connection import close_db, get_session, get_session_factory, init_db
from salescrm.exceptions import SalesCRMError
from salescrm.models import UserRole
from salescrm.reporting.builder import build_customer_transaction_report
from salescrm.reporting.csv_export import export_customers_csv, export_transactions_csv
from salescrm.reporting.formatting import format_currency, format_date, or_missing
from salescrm.reporting.pdf_export import export_customers_pdf, export_transactions_pdf
from salescrm.sales.aggregator import (
    get_transaction_detail,
    list_customer_transactions,
    summarize_customer_transactions,
    transaction_total,
)

app = typer.Typer(
    name="salescrm",
    help="SalesCRM - Customer records, price-effective sales totals and reports",
    no_args_is_help=True,
)

web_cli = typer.Typer(help="Web UI / API")
app.add_typer(web_cli, name="web")

console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", envvar="LOG_LEVEL", help="Log verbosity"),
):
    """Configure logging before any command runs."""
    configure_logging(level=log_level)


def _run(coro):
    """Run a coroutine, disposing the engine afterwards and reporting domain errors."""

    async def _wrapped():
        try:
            return await coro
        finally:
            await close_db()

    try:
        return asyncio.run(_wrapped())
    except SalesCRMError as e:
        console.print(f"[bold red]✗[/bold red] {e}")
        raise typer.Exit(code=1) from e


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    _run(init_db(drop=drop))
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def customers(
    query: str | None = typer.Option(None, "--query", "-q", help="Match code, name or address"),
):
    """List customer records."""

    async def _list():
        async with get_session() as session:
            return await search_customers(session, query)

    rows = _run(_list())
    if not rows:
        console.print("[yellow]No customer records found[/yellow]")
        return

    table = Table(title="Customers")
    table.add_column("Customer ID")
    table.add_column("Customer Name")
    table.add_column("Address")
    table.add_column("Payment Terms")
    for customer in rows:
        table.add_row(
            customer.custno,
            customer.custname,
            or_missing(customer.address),
            or_missing(customer.payterm),
        )
    console.print(table)
    console.print(f"Total Customers: {len(rows)}")


@app.command(name="next-id")
def next_id_cmd():
    """Show the customer code the next new customer will get."""

    async def _next():
        async with get_session() as session:
            return await next_customer_id(session)

    console.print(_run(_next()))


@app.command()
def transactions(
    custno: str = typer.Argument(..., help="Customer code"),
    isolate: bool = typer.Option(
        False, "--isolate", help="Total transactions concurrently, keeping failures per transaction"
    ),
):
    """List a customer's transactions with price-effective totals."""
    config = get_config()

    async def _strict():
        async with get_session() as session:
            return await list_customer_transactions(session, custno)

    table = Table(title=f"Transactions for {custno}")
    table.add_column("Transaction")
    table.add_column("Date")
    table.add_column("Total", justify="right")

    if isolate:
        outcomes = _run(
            summarize_customer_transactions(
                get_session_factory(), custno, max_concurrency=config.aggregation.max_concurrency
            )
        )
        failed = 0
        for outcome in outcomes:
            if outcome.ok:
                total = format_currency(outcome.total_sales)
            else:
                failed += 1
                total = f"[red]{outcome.error}[/red]"
            table.add_row(outcome.transno, format_date(outcome.salesdate), total)
        console.print(table)
        if failed:
            console.print(f"[yellow]⚠[/yellow] {failed} transaction(s) could not be totalled")
        return

    summaries = _run(_strict())
    if not summaries:
        console.print(f"[yellow]No transactions found for {custno}[/yellow]")
        return
    for summary in summaries:
        table.add_row(
            summary.transno, format_date(summary.salesdate), format_currency(summary.total_sales)
        )
    console.print(table)


@app.command()
def detail(
    transno: str = typer.Argument(..., help="Transaction number"),
    salesdate: str = typer.Argument(..., help="Sales date used for pricing (YYYY-MM-DD)"),
):
    """Show the priced line items of one transaction."""
    try:
        as_of = date.fromisoformat(salesdate)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date: {salesdate}") from e

    async def _detail():
        async with get_session() as session:
            return await get_transaction_detail(session, transno, as_of)

    lines = _run(_detail())
    if not lines:
        console.print(f"[yellow]No line items for {transno}[/yellow]")
        return

    table = Table(title=f"Transaction {transno} ({format_date(as_of)})")
    table.add_column("Product")
    table.add_column("Description")
    table.add_column("Qty", justify="right")
    table.add_column("Unit Price", justify="right")
    table.add_column("Subtotal", justify="right")
    for line in lines:
        table.add_row(
            line.prodcode,
            line.description,
            str(line.quantity),
            format_currency(line.unitprice),
            format_currency(line.subtotal),
        )
    console.print(table)
    console.print(f"[bold]Total:[/bold] {format_currency(transaction_total(lines))}")


@app.command()
def report(
    kind: str = typer.Argument(..., help="customers | transactions"),
    custno: str | None = typer.Option(None, "--custno", help="Customer code (transactions report)"),
    fmt: str = typer.Option("csv", "--format", "-f", help="csv | pdf"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file"),
    details: bool = typer.Option(True, "--details/--no-details", help="Include line items"),
):
    """Export a printable report."""
    if kind not in ("customers", "transactions"):
        raise typer.BadParameter("kind must be 'customers' or 'transactions'")
    if fmt not in ("csv", "pdf"):
        raise typer.BadParameter("format must be 'csv' or 'pdf'")
    if kind == "transactions" and not custno:
        raise typer.BadParameter("--custno is required for the transactions report")

    async def _customers():
        async with get_session() as session:
            return await search_customers(session)

    async def _transactions():
        async with get_session() as session:
            return await build_customer_transaction_report(session, custno, include_details=details)

    if kind == "customers":
        rows = _run(_customers())
        content = export_customers_csv(rows) if fmt == "csv" else export_customers_pdf(rows)
        stem = "customers"
    else:
        built = _run(_transactions())
        if fmt == "csv":
            content = export_transactions_csv(built, include_details=details)
        else:
            content = export_transactions_pdf(built)
        stem = f"transactions_{custno}"
        console.print(f"Grand total: {format_currency(built.grand_total)}")

    output = output or Path(f"{stem}_{datetime.now().strftime('%Y%m%d')}.{fmt}")
    if isinstance(content, str):
        output.write_text(content, encoding="utf-8")
    else:
        output.write_bytes(content)
    console.print(f"[green]✓[/green] Report saved to: {output}")


@app.command(name="create-user")
def create_user_cmd(
    email: str = typer.Argument(..., help="Login email"),
    name: str = typer.Option(..., "--name", help="Display name"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
    role: UserRole = typer.Option(UserRole.USER, "--role", help="admin | customer | user"),
):
    """Create an account. Admin accounts can only be created here."""

    async def _create():
        async with get_session() as session:
            user = await register_user(session, name, email, password, role=role)
            return user.email

    created = _run(_create())
    console.print(f"[bold green]✓[/bold green] Created {role.value} account {created}")


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI web app."""
    import uvicorn

    typer.echo(f"Starting SalesCRM on http://{host}:{port}")
    uvicorn.run("salescrm.web.app:app", host=host, port=port, reload=reload, workers=1)


if __name__ == "__main__":
    app()
