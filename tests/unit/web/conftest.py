"""Shared fixtures for web route tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def admin_user() -> dict:
    return {"user_id": None, "email": "admin@example.com", "role": "admin", "custno": None}


@pytest.fixture
def staff_user() -> dict:
    return {"user_id": None, "email": "staff@example.com", "role": "user", "custno": None}


@pytest.fixture
def customer_user() -> dict:
    return {
        "user_id": "5b0c6a3e-8f0e-4c1a-9a51-6f1b8f3c2d10",
        "email": "buyer@example.com",
        "role": "customer",
        "custno": "C0001",
    }


@pytest.fixture
def mock_db_session():
    """Mock database session with async context manager."""
    session = AsyncMock()
    session.execute = AsyncMock()

    # Create async context manager
    async_cm = AsyncMock()
    async_cm.__aenter__.return_value = session
    async_cm.__aexit__.return_value = None

    return async_cm
