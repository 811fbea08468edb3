"""Pytest configuration and fixtures for SalesCRM tests.

Provides an in-memory database seeded with a small CRM dataset:

- Product P1 priced 10.00 from 2024-01-01 and 12.00 from 2024-06-01
- Product P2 with no price history
- Customer C0001 with transactions T1 (2024-03-15), T2 (2024-07-01) and
  T3 (2024-03-15, two P1 lines)
- Customer C0002 with no transactions
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from salescrm.config import reset_config
from salescrm.db.models import (
    Base,
    CustomerModel,
    PaymentModel,
    PriceHistModel,
    ProductModel,
    SaleModel,
    SalesDetailModel,
)


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Point configuration at a throwaway database and cheap password hashing."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("REDIS_URL", "redis://localhost:1/0")
    monkeypatch.delenv("SALESCRM_AUTH_DISABLED", raising=False)
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    reset_config()
    yield
    reset_config()


async def seed(session: AsyncSession) -> None:
    """Insert the reference dataset described in the module docstring."""
    session.add_all(
        [
            CustomerModel(custno="C0001", custname="Acme Trading", address="12 Main St", payterm="30D"),
            CustomerModel(custno="C0002", custname="Bayside Foods", address="", payterm="COD"),
            ProductModel(prodcode="P1", description="Widget", unit="pc"),
            ProductModel(prodcode="P2", description="Gadget", unit="pc"),
        ]
    )
    await session.flush()

    session.add_all(
        [
            PriceHistModel(prodcode="P1", effdate=date(2024, 1, 1), unitprice=Decimal("10.00")),
            PriceHistModel(prodcode="P1", effdate=date(2024, 6, 1), unitprice=Decimal("12.00")),
            SaleModel(transno="T1", salesdate=date(2024, 3, 15), custno="C0001", empno="E1"),
            SaleModel(transno="T2", salesdate=date(2024, 7, 1), custno="C0001", empno="E1"),
            SaleModel(transno="T3", salesdate=date(2024, 3, 15), custno="C0001", empno="E2"),
        ]
    )
    await session.flush()

    session.add_all(
        [
            SalesDetailModel(transno="T1", prodcode="P1", quantity=3),
            SalesDetailModel(transno="T2", prodcode="P1", quantity=2),
            SalesDetailModel(transno="T2", prodcode="P2", quantity=5),
            SalesDetailModel(transno="T3", prodcode="P1", quantity=1),
            SalesDetailModel(transno="T3", prodcode="P1", quantity=4),
            PaymentModel(orno="OR1", paydate=date(2024, 3, 20), amount=Decimal("30.00"), transno="T1"),
            PaymentModel(orno="OR2", paydate=date(2024, 7, 5), amount=Decimal("24.00"), transno="T2"),
        ]
    )
    await session.flush()


@pytest_asyncio.fixture()
async def db_session() -> AsyncSession:
    """Create in-memory database for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def seeded_session(db_session: AsyncSession) -> AsyncSession:
    """In-memory database with the reference dataset."""
    await seed(db_session)
    return db_session


@pytest_asyncio.fixture()
async def file_session_factory(tmp_path):
    """Session factory over a seeded on-disk database.

    Concurrent aggregation opens one session per transaction, which needs
    real separate connections.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'salescrm.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed(session)
        await session.commit()

    try:
        yield factory
    finally:
        await engine.dispose()
