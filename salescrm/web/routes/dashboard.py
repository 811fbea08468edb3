"""Dashboard routes.

Routes:
- GET /            - Redirect to the dashboard
- GET /dashboard   - Recent sales and payments
- GET /api/dashboard
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from salescrm.config import get_config
from salescrm.db.connection import get_session
from salescrm.sales.repository import get_recent_payments, get_recent_sales
from salescrm.web.auth import require_staff
from salescrm.web.dependencies import get_templates
from salescrm.web.models import DashboardResponse

router = APIRouter(tags=["dashboard"])


async def _load_dashboard() -> DashboardResponse:
    limit = get_config().aggregation.recent_limit
    async with get_session() as session:
        sales = await get_recent_sales(session, limit)
        payments = await get_recent_payments(session, limit)
    return DashboardResponse(sales=sales, payments=payments)


@router.get("/", include_in_schema=False)
async def index():
    return RedirectResponse(url="/dashboard", status_code=302)


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    user: dict = Depends(require_staff),
    templates=Depends(get_templates),
):
    data = await _load_dashboard()
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"sales": data.sales, "payments": data.payments, "user": user},
    )


@router.get("/api/dashboard", response_model=DashboardResponse)
async def dashboard_data(user: dict = Depends(require_staff)):
    return await _load_dashboard()
