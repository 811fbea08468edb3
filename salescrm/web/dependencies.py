"""Shared dependencies for SalesCRM web routes.

Usage:
    from fastapi import Depends
    from salescrm.web.dependencies import get_templates

    @router.get("/page")
    async def page(request: Request, templates=Depends(get_templates)):
        return templates.TemplateResponse(request, "page.html", {})
"""

from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates

from salescrm.reporting.formatting import format_currency, format_date, or_missing

# Global singleton for templates
_templates: Jinja2Templates | None = None


def get_templates() -> Jinja2Templates:
    """Jinja2Templates for ``salescrm/web/templates`` with report filters registered.

    Filters: ``currency``, ``date`` and ``or_na``.
    """
    global _templates
    if _templates is None:
        _templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
        _templates.env.filters["currency"] = format_currency
        _templates.env.filters["date"] = format_date
        _templates.env.filters["or_na"] = or_missing
    return _templates
