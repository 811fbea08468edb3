"""Authentication routes for SalesCRM web UI.

Routes:
- GET  /login       - Login page
- POST /login       - Process login form, redirect by role
- POST /signup      - Register an account (customer or plain user)
- GET  /logout      - Logout and clear session
- GET  /favicon.ico - Return empty favicon (204)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Cookie, Depends, Form, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from salescrm.accounts.service import (
    authenticate,
    get_linked_custno,
    landing_path,
    register_user,
    resolve_user_role,
)
from salescrm.db.connection import get_session
from salescrm.exceptions import RecordValidationError
from salescrm.models import UserRole
from salescrm.web.auth import SESSION_COOKIE, create_session, validate_session
from salescrm.web.auth import logout as auth_logout
from salescrm.web.dependencies import get_templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

SELF_SERVICE_ROLES = {UserRole.CUSTOMER.value, UserRole.USER.value}


def _login_redirect(session_token: str, role: UserRole) -> RedirectResponse:
    response = RedirectResponse(url=landing_path(role), status_code=302)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token,
        httponly=True,
        max_age=86400,  # 24 hours
        samesite="lax",
    )
    return response


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    error: str | None = None,
    notice: str | None = None,
    templates=Depends(get_templates),
):
    """Login and signup page."""
    return templates.TemplateResponse(
        request,
        "login.html",
        {"error": error, "notice": notice},
    )


@router.post("/login")
async def login(
    email: str = Form(...),
    password: str = Form(...),
):
    """Check credentials, resolve the role and redirect to its landing page."""
    async with get_session() as session:
        user = await authenticate(session, email, password)
        if user is None:
            logger.info("Login failed for %s", email)
            return RedirectResponse(url="/login?error=invalid", status_code=302)

        role = await resolve_user_role(session, user.id)
        custno = await get_linked_custno(session, user.id) if role == UserRole.CUSTOMER else None

    session_token = create_session(str(user.id), user.email, role, custno=custno)
    logger.info("Login succeeded for %s as %s", user.email, role.value)
    return _login_redirect(session_token, role)


@router.post("/signup")
async def signup(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    role: str = Form(UserRole.USER.value),
):
    """Create an account. Admin accounts are created from the CLI only."""
    if role not in SELF_SERVICE_ROLES:
        return RedirectResponse(url="/login?error=role", status_code=302)

    try:
        async with get_session() as session:
            await register_user(session, name, email, password, UserRole(role))
    except RecordValidationError as exc:
        logger.info("Signup rejected for %s: %s", email, exc)
        return RedirectResponse(url=f"/login?error={exc.field}", status_code=302)

    return RedirectResponse(url="/login?notice=created", status_code=302)


@router.get("/logout")
async def logout(session: str | None = Cookie(default=None)):
    """Invalidate the session and return to the login page."""
    session_data = validate_session(session)
    if session:
        auth_logout(session)
    if session_data:
        logger.info("Logout for %s", session_data.get("email"))

    response = RedirectResponse(url="/login", status_code=302)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)
