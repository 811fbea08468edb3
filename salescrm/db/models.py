"""SQLAlchemy async database models for SalesCRM.

Table and column names follow the existing CRM schema (``customer``,
``sales``, ``salesdetail``, ``pricehist``, ...). ``app_users`` holds the
login accounts that the role tables (``admins``, ``user_customer_map``)
point at.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class CustomerModel(Base):
    """Customer master record."""

    __tablename__ = "customer"

    custno: Mapped[str] = mapped_column(String(10), primary_key=True)
    custname: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    payterm: Mapped[str | None] = mapped_column(String(3))  # COD, 30D, 45D


class ProductModel(Base):
    """Product catalogue entry."""

    __tablename__ = "product"

    prodcode: Mapped[str] = mapped_column(String(10), primary_key=True)
    description: Mapped[str | None] = mapped_column(Text)
    unit: Mapped[str | None] = mapped_column(String(10))


class PriceHistModel(Base):
    """Price history: one row per (product, effective-from date) price change.

    The surrogate ``id`` breaks ties between rows that share an ``effdate``.
    """

    __tablename__ = "pricehist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prodcode: Mapped[str] = mapped_column(
        String(10), ForeignKey("product.prodcode"), nullable=False
    )
    effdate: Mapped[date] = mapped_column(Date, nullable=False)
    unitprice: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        Index("idx_pricehist_prodcode_effdate", "prodcode", "effdate"),
    )


class SaleModel(Base):
    """Sales transaction header."""

    __tablename__ = "sales"

    transno: Mapped[str] = mapped_column(String(10), primary_key=True)
    salesdate: Mapped[date | None] = mapped_column(Date, index=True)
    custno: Mapped[str | None] = mapped_column(
        String(10), ForeignKey("customer.custno"), index=True
    )
    empno: Mapped[str | None] = mapped_column(String(10))


class SalesDetailModel(Base):
    """Sales line item. Several rows may reference the same product."""

    __tablename__ = "salesdetail"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transno: Mapped[str] = mapped_column(
        String(10), ForeignKey("sales.transno"), nullable=False, index=True
    )
    prodcode: Mapped[str] = mapped_column(
        String(10), ForeignKey("product.prodcode"), nullable=False
    )
    quantity: Mapped[int | None] = mapped_column(Integer)


class PaymentModel(Base):
    """Payment received against a transaction."""

    __tablename__ = "payment"

    orno: Mapped[str] = mapped_column(String(10), primary_key=True)
    paydate: Mapped[date | None] = mapped_column(Date, index=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    transno: Mapped[str | None] = mapped_column(String(10), ForeignKey("sales.transno"))


class AppUserModel(Base):
    """Login account."""

    __tablename__ = "app_users"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class AdminModel(Base):
    """Marks an account as administrator."""

    __tablename__ = "admins"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("app_users.id", ondelete="CASCADE"), primary_key=True
    )
    name: Mapped[str | None] = mapped_column(Text)


class UserCustomerMapModel(Base):
    """Links an account to the customer record it may view and edit."""

    __tablename__ = "user_customer_map"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("app_users.id", ondelete="CASCADE"), primary_key=True
    )
    customer_id: Mapped[str] = mapped_column(
        String(10), ForeignKey("customer.custno", ondelete="CASCADE"), nullable=False, index=True
    )
