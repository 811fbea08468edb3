"""Customer management API (admin only).

Routes:
- GET    /api/customers            - Search customers (?q=)
- GET    /api/customers/next-id    - Next free customer code
- POST   /api/customers            - Add customer
- GET    /api/customers/{custno}   - Customer record
- PUT    /api/customers/{custno}   - Update name/address/payment terms
- DELETE /api/customers/{custno}   - Delete customer and account links
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from salescrm.customers import repository
from salescrm.db.connection import get_session
from salescrm.models import Customer, CustomerInput
from salescrm.web.auth import require_admin
from salescrm.web.models import NextCustomerIdResponse

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", response_model=list[Customer])
async def list_customers(q: str | None = None, user: dict = Depends(require_admin)):
    async with get_session() as session:
        return await repository.search_customers(session, q)


@router.get("/next-id", response_model=NextCustomerIdResponse)
async def next_customer_id(user: dict = Depends(require_admin)):
    async with get_session() as session:
        custno = await repository.next_customer_id(session)
    return NextCustomerIdResponse(custno=custno)


@router.post("", response_model=Customer, status_code=201)
async def add_customer(data: CustomerInput, user: dict = Depends(require_admin)):
    async with get_session() as session:
        return await repository.create_customer(session, data)


@router.get("/{custno}", response_model=Customer)
async def get_customer(custno: str, user: dict = Depends(require_admin)):
    async with get_session() as session:
        customer = await repository.get_customer(session, custno)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.put("/{custno}", response_model=Customer)
async def edit_customer(custno: str, data: CustomerInput, user: dict = Depends(require_admin)):
    async with get_session() as session:
        return await repository.update_customer(session, custno, data)


@router.delete("/{custno}", status_code=204)
async def remove_customer(custno: str, user: dict = Depends(require_admin)):
    async with get_session() as session:
        await repository.delete_customer(session, custno)
    return Response(status_code=204)
