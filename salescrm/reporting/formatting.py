"""Display formatting shared by the printable reports."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from salescrm.config import get_config

MISSING = "N/A"


def format_currency(value: Decimal | int | float | None, symbol: str | None = None) -> str:
    """``Decimal("1234.5")`` -> ``$1,234.50``; None renders as ``-``."""
    if value is None:
        return "-"
    if symbol is None:
        symbol = get_config().reports.currency_symbol

    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_date(value: date | None, fmt: str | None = None) -> str:
    """``date(2024, 3, 15)`` -> ``Mar 15, 2024``; None renders as ``-``."""
    if value is None:
        return "-"
    if fmt is None:
        fmt = get_config().reports.date_format
    return value.strftime(fmt)


def or_missing(value: str | None) -> str:
    """Blank optional text fields render as N/A."""
    return value if value else MISSING
