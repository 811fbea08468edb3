"""Tests for the dashboard, customer profile and health routes."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import UUID

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from salescrm.db.connection import get_db
from salescrm.models import Customer, Payment, Sale, TransactionSummary
from salescrm.web.auth import require_customer, require_staff
from salescrm.web.routes import dashboard, health, profile


@pytest.fixture
def recent():
    sales = [Sale(transno="T2", salesdate=date(2024, 7, 1), custno="C0001", empno="E1")]
    payments = [Payment(orno="OR2", paydate=date(2024, 7, 5), amount=Decimal("24.00"), transno="T2")]
    return sales, payments


class TestDashboard:
    @pytest.fixture
    def client(self, staff_user):
        test_app = FastAPI()
        test_app.include_router(dashboard.router)
        test_app.dependency_overrides[require_staff] = lambda: staff_user
        return TestClient(test_app)

    def test_root_redirects(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/dashboard"

    @patch("salescrm.web.routes.dashboard.get_recent_payments", new_callable=AsyncMock)
    @patch("salescrm.web.routes.dashboard.get_recent_sales", new_callable=AsyncMock)
    @patch("salescrm.web.routes.dashboard.get_session")
    def test_dashboard_page(
        self, mock_get_session, mock_sales, mock_payments, client, mock_db_session, recent
    ):
        mock_get_session.return_value = mock_db_session
        mock_sales.return_value, mock_payments.return_value = recent

        response = client.get("/dashboard")

        assert response.status_code == 200
        assert "Recent Payments" in response.text
        assert "$24.00" in response.text
        assert "Jul 01, 2024" in response.text

    @patch("salescrm.web.routes.dashboard.get_recent_payments", new_callable=AsyncMock)
    @patch("salescrm.web.routes.dashboard.get_recent_sales", new_callable=AsyncMock)
    @patch("salescrm.web.routes.dashboard.get_session")
    def test_dashboard_api_uses_configured_limit(
        self, mock_get_session, mock_sales, mock_payments, client, mock_db_session, recent, monkeypatch
    ):
        monkeypatch.setenv("DASHBOARD_RECENT_LIMIT", "5")
        mock_get_session.return_value = mock_db_session
        mock_sales.return_value, mock_payments.return_value = recent

        body = client.get("/api/dashboard").json()

        assert body["sales"][0]["transno"] == "T2"
        assert body["payments"][0]["orno"] == "OR2"
        assert mock_sales.call_args.args[1] == 5

    def test_customers_sent_to_profile(self, customer_user):
        test_app = FastAPI()
        test_app.include_router(dashboard.router)
        with patch("salescrm.web.auth.validate_session", return_value=customer_user):
            client = TestClient(test_app)
            client.cookies.set("session", "customer-token")
            response = client.get("/dashboard", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/customer-profile"


class TestProfile:
    @pytest.fixture
    def client(self, customer_user):
        test_app = FastAPI()
        test_app.include_router(profile.router)
        test_app.dependency_overrides[require_customer] = lambda: customer_user
        return TestClient(test_app)

    @patch("salescrm.web.routes.profile.list_customer_transactions", new_callable=AsyncMock)
    @patch("salescrm.web.routes.profile.get_customer", new_callable=AsyncMock)
    @patch("salescrm.web.routes.profile.get_session")
    def test_profile_page(
        self, mock_get_session, mock_get_customer, mock_list, client, mock_db_session
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_customer.return_value = Customer(
            custno="C0001", custname="Acme Trading", address="", payterm="COD"
        )
        mock_list.return_value = [
            TransactionSummary(transno="T1", salesdate=date(2024, 3, 15), total_sales=Decimal("30"))
        ]

        response = client.get("/customer-profile")

        assert response.status_code == 200
        assert "Acme Trading" in response.text
        assert "N/A" in response.text
        assert "$30.00" in response.text

    @patch("salescrm.web.routes.profile.list_customer_transactions", new_callable=AsyncMock)
    @patch("salescrm.web.routes.profile.get_customer", new_callable=AsyncMock)
    @patch("salescrm.web.routes.profile.get_session")
    def test_unlinked_profile(
        self, mock_get_session, mock_get_customer, mock_list, client, mock_db_session
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_customer.return_value = None

        body = client.get("/api/profile").json()

        assert body == {"customer": None, "transactions": []}
        mock_list.assert_not_called()

    @patch("salescrm.web.routes.profile.update_customer", new_callable=AsyncMock)
    @patch("salescrm.web.routes.profile.get_session")
    def test_update_own_record(self, mock_get_session, mock_update, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_update.return_value = Customer(custno="C0001", custname="Acme Ltd")

        response = client.put("/api/profile", json={"custname": "Acme Ltd", "payterm": "45D"})

        assert response.status_code == 200
        assert mock_update.call_args.args[1] == "C0001"

    @patch("salescrm.web.routes.profile.auth_logout")
    @patch("salescrm.web.routes.profile.delete_account", new_callable=AsyncMock)
    @patch("salescrm.web.routes.profile.get_session")
    def test_delete_account(
        self, mock_get_session, mock_delete, mock_logout, client, mock_db_session, customer_user
    ):
        mock_get_session.return_value = mock_db_session
        client.cookies.set("session", "customer-token")

        response = client.delete("/api/profile")

        assert response.json() == {"deleted": "C0001"}
        assert mock_delete.call_args.args[1] == UUID(customer_user["user_id"])
        mock_logout.assert_called_once_with("customer-token")

    def test_staff_cannot_open_profile(self, staff_user):
        test_app = FastAPI()
        test_app.include_router(profile.router)
        with patch("salescrm.web.auth.validate_session", return_value=staff_user):
            client = TestClient(test_app)
            client.cookies.set("session", "staff-token")
            assert client.get("/api/profile").status_code == 403


class TestHealth:
    def _client(self, session) -> TestClient:
        async def _db():
            yield session

        test_app = FastAPI()
        test_app.include_router(health.router)
        test_app.dependency_overrides[get_db] = _db
        return TestClient(test_app)

    def test_connected(self):
        session = AsyncMock()
        assert self._client(session).get("/health").json() == {
            "status": "ok",
            "database": "connected",
        }

    def test_disconnected(self):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("refused"))

        body = self._client(session).get("/health").json()

        assert body["status"] == "error"
        assert body["database"] == "disconnected"
