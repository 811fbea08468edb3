"""Accounts: registration, credential checks and role resolution.

A role is not stored on the account. It is derived from which link table
references the account: ``admins`` first, then ``user_customer_map``;
anything else is a plain ``user``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from salescrm.config import get_config
from salescrm.customers.repository import create_customer, get_customer
from salescrm.db.models import AdminModel, AppUserModel, CustomerModel, UserCustomerMapModel
from salescrm.exceptions import FetchError, RecordValidationError
from salescrm.models import Customer, CustomerInput, PayTerm, UserRole

logger = logging.getLogger(__name__)

LANDING_PATHS = {
    UserRole.ADMIN: "/dashboard",
    UserRole.CUSTOMER: "/customer-profile",
    UserRole.USER: "/dashboard",
}


def landing_path(role: UserRole) -> str:
    """Page a freshly logged-in account is sent to."""
    return LANDING_PATHS[role]


def hash_password(password: str, rounds: int | None = None) -> str:
    if rounds is None:
        rounds = get_config().auth.bcrypt_rounds
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


async def _exists(session: AsyncSession, stmt, what: str) -> bool:
    try:
        result = await session.execute(stmt.limit(1))
    except SQLAlchemyError as exc:
        raise FetchError(f"check {what}") from exc
    return result.first() is not None


async def resolve_user_role(session: AsyncSession, user_id: UUID) -> UserRole:
    """Ordered existence checks: admin, then customer, else user."""
    if await _exists(
        session, select(AdminModel.user_id).where(AdminModel.user_id == user_id), "admin role"
    ):
        return UserRole.ADMIN

    if await _exists(
        session,
        select(UserCustomerMapModel.customer_id).where(UserCustomerMapModel.user_id == user_id),
        "customer role",
    ):
        return UserRole.CUSTOMER

    return UserRole.USER


async def get_user_by_email(session: AsyncSession, email: str) -> AppUserModel | None:
    stmt = select(AppUserModel).where(AppUserModel.email == email.strip().lower())
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch user") from exc
    return result.scalars().first()


async def register_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.USER,
) -> AppUserModel:
    """Create an account and its role link.

    Customers get a freshly allocated customer record (empty address, COD
    terms) linked to the account.

    Raises:
        RecordValidationError: Missing fields or email already registered
        FetchError: If a write fails
    """
    if not name.strip():
        raise RecordValidationError("name", "Name is required")
    if not email.strip():
        raise RecordValidationError("email", "Email is required")
    if not password:
        raise RecordValidationError("password", "Password is required")

    if await get_user_by_email(session, email) is not None:
        raise RecordValidationError("email", "Email already registered")

    user = AppUserModel(
        email=email.strip().lower(),
        name=name.strip(),
        password_hash=hash_password(password),
        is_active=True,
    )
    session.add(user)
    try:
        await session.flush()
    except SQLAlchemyError as exc:
        raise FetchError("create user", email) from exc

    if role == UserRole.ADMIN:
        session.add(AdminModel(user_id=user.id, name=user.name))
    elif role == UserRole.CUSTOMER:
        customer = await create_customer(
            session, CustomerInput(custname=user.name, address="", payterm=PayTerm.COD)
        )
        session.add(UserCustomerMapModel(user_id=user.id, customer_id=customer.custno))

    try:
        await session.flush()
    except SQLAlchemyError as exc:
        raise FetchError("link user role", email) from exc

    logger.info("Registered %s account %s", role.value, user.email)
    return user


async def authenticate(session: AsyncSession, email: str, password: str) -> AppUserModel | None:
    """Return the active account matching the credentials, else None."""
    user = await get_user_by_email(session, email)
    if user is None or not user.is_active:
        return None
    if not check_password(password, user.password_hash):
        return None

    user.last_login = datetime.now(timezone.utc)
    return user


async def get_linked_custno(session: AsyncSession, user_id: UUID) -> str | None:
    stmt = select(UserCustomerMapModel.customer_id).where(UserCustomerMapModel.user_id == user_id)
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise FetchError("fetch customer link") from exc
    return result.scalars().first()


async def get_linked_customer(session: AsyncSession, user_id: UUID) -> Customer | None:
    """Customer record an account is linked to, if any."""
    custno = await get_linked_custno(session, user_id)
    if custno is None:
        return None
    return await get_customer(session, custno)


async def delete_account(session: AsyncSession, user_id: UUID) -> None:
    """Remove the customer linked to an account together with the link."""
    custno = await get_linked_custno(session, user_id)
    try:
        await session.execute(
            delete(UserCustomerMapModel).where(UserCustomerMapModel.user_id == user_id)
        )
        if custno is not None:
            await session.execute(delete(CustomerModel).where(CustomerModel.custno == custno))
        await session.flush()
    except SQLAlchemyError as exc:
        raise FetchError("delete account") from exc

    logger.info("Deleted customer account for user %s (customer %s)", user_id, custno)
