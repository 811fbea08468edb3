"""Customer self-service profile.

Routes:
- GET    /customer-profile  - Profile page with transaction history
- GET    /api/profile       - Linked customer record and transactions
- PUT    /api/profile       - Update own name/address/payment terms
- DELETE /api/profile       - Delete own customer record and log out
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Cookie, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

from salescrm.accounts.service import delete_account
from salescrm.customers.repository import get_customer, update_customer
from salescrm.db.connection import get_session
from salescrm.models import Customer, CustomerInput
from salescrm.sales.aggregator import list_customer_transactions
from salescrm.web.auth import SESSION_COOKIE, require_customer
from salescrm.web.auth import logout as auth_logout
from salescrm.web.dependencies import get_templates
from salescrm.web.models import ProfileResponse

router = APIRouter(tags=["profile"])


async def _load_profile(custno: str) -> ProfileResponse:
    async with get_session() as session:
        customer = await get_customer(session, custno)
        transactions = await list_customer_transactions(session, custno) if customer else []
    return ProfileResponse(customer=customer, transactions=transactions)


@router.get("/customer-profile", response_class=HTMLResponse)
async def profile_page(
    request: Request,
    user: dict = Depends(require_customer),
    templates=Depends(get_templates),
):
    profile = await _load_profile(user["custno"])
    return templates.TemplateResponse(
        request,
        "profile.html",
        {"customer": profile.customer, "transactions": profile.transactions, "user": user},
    )


@router.get("/api/profile", response_model=ProfileResponse)
async def get_profile(user: dict = Depends(require_customer)):
    return await _load_profile(user["custno"])


@router.put("/api/profile", response_model=Customer)
async def update_profile(data: CustomerInput, user: dict = Depends(require_customer)):
    async with get_session() as session:
        return await update_customer(session, user["custno"], data)


@router.delete("/api/profile")
async def delete_profile(
    user: dict = Depends(require_customer),
    session: str | None = Cookie(default=None),
):
    async with get_session() as db:
        await delete_account(db, UUID(user["user_id"]))

    auth_logout(session)
    response = JSONResponse({"deleted": user["custno"]})
    response.delete_cookie(SESSION_COOKIE)
    return response
