"""Tests for salescrm.web.routes.transactions - Transaction history API."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from salescrm.models import PricedLine, Sale, TransactionOutcome, TransactionSummary
from salescrm.web.auth import require_auth
from salescrm.web.routes import transactions


def _client(user: dict) -> TestClient:
    test_app = FastAPI()
    test_app.include_router(transactions.router)
    test_app.dependency_overrides[require_auth] = lambda: user
    return TestClient(test_app)


@pytest.fixture
def summaries():
    return [
        TransactionSummary(transno="T2", salesdate=date(2024, 7, 1), total_sales=Decimal("24.00")),
        TransactionSummary(transno="T1", salesdate=date(2024, 3, 15), total_sales=Decimal("30.00")),
    ]


class TestCustomerTransactions:
    @patch("salescrm.web.routes.transactions.list_customer_transactions", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_session")
    def test_admin_lists_any_customer(
        self, mock_get_session, mock_list, admin_user, mock_db_session, summaries
    ):
        mock_get_session.return_value = mock_db_session
        mock_list.return_value = summaries

        response = _client(admin_user).get("/api/customers/C0001/transactions")

        assert response.status_code == 200
        body = response.json()
        assert body["custno"] == "C0001"
        assert [t["transno"] for t in body["transactions"]] == ["T2", "T1"]
        assert Decimal(body["transactions"][0]["total_sales"]) == Decimal("24.00")

    @patch("salescrm.web.routes.transactions.list_customer_transactions", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_session")
    def test_customer_reads_own_transactions(
        self, mock_get_session, mock_list, customer_user, mock_db_session
    ):
        mock_get_session.return_value = mock_db_session
        mock_list.return_value = []

        response = _client(customer_user).get("/api/customers/C0001/transactions")

        assert response.status_code == 200
        assert response.json()["transactions"] == []

    def test_customer_cannot_read_others(self, customer_user):
        response = _client(customer_user).get("/api/customers/C0002/transactions")
        assert response.status_code == 403

    def test_staff_cannot_read_customer_history(self, staff_user):
        response = _client(staff_user).get("/api/customers/C0001/transactions")
        assert response.status_code == 403

    @patch("salescrm.web.routes.transactions.get_session_factory")
    @patch(
        "salescrm.web.routes.transactions.summarize_customer_transactions", new_callable=AsyncMock
    )
    def test_isolated_listing_reports_failures(self, mock_summarize, mock_factory, admin_user):
        factory = MagicMock()
        mock_factory.return_value = factory
        mock_summarize.return_value = [
            TransactionOutcome(transno="T2", salesdate=date(2024, 7, 1), error="Failed to resolve prices"),
            TransactionOutcome(transno="T1", salesdate=date(2024, 3, 15), total_sales=Decimal("30.00")),
        ]

        response = _client(admin_user).get("/api/customers/C0001/transactions?isolate=true")

        assert response.status_code == 200
        body = response.json()
        assert body["failed"] == 1
        assert body["outcomes"][0]["total_sales"] is None
        assert body["outcomes"][0]["error"] == "Failed to resolve prices"
        assert mock_summarize.call_args.args == (factory, "C0001")
        assert mock_summarize.call_args.kwargs == {"max_concurrency": 4}


class TestTransactionDetail:
    @patch("salescrm.web.routes.transactions.get_transaction_detail", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_sale", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_session")
    def test_defaults_to_sale_date(
        self, mock_get_session, mock_get_sale, mock_detail, customer_user, mock_db_session
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_sale.return_value = Sale(transno="T1", salesdate=date(2024, 3, 15), custno="C0001")
        mock_detail.return_value = [
            PricedLine(
                prodcode="P1",
                description="Widget",
                quantity=3,
                unitprice=Decimal("10.00"),
                subtotal=Decimal("30.00"),
            ),
            PricedLine(prodcode="P2", description="Gadget", quantity=5),
        ]

        response = _client(customer_user).get("/api/transactions/T1")

        assert response.status_code == 200
        body = response.json()
        assert body["salesdate"] == "2024-03-15"
        assert Decimal(body["total"]) == Decimal("30.00")
        assert len(body["lines"]) == 2
        assert mock_detail.call_args.args[1:] == ("T1", date(2024, 3, 15))

    @patch("salescrm.web.routes.transactions.get_transaction_detail", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_sale", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_session")
    def test_explicit_salesdate(
        self, mock_get_session, mock_get_sale, mock_detail, admin_user, mock_db_session
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_sale.return_value = Sale(transno="T1", salesdate=date(2024, 3, 15), custno="C0001")
        mock_detail.return_value = []

        response = _client(admin_user).get("/api/transactions/T1?salesdate=2024-07-01")

        assert response.json()["salesdate"] == "2024-07-01"
        assert mock_detail.call_args.args[2] == date(2024, 7, 1)

    @patch("salescrm.web.routes.transactions.get_sale", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_session")
    def test_unknown_transaction(self, mock_get_session, mock_get_sale, admin_user, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_get_sale.return_value = None

        assert _client(admin_user).get("/api/transactions/NOPE").status_code == 404

    @patch("salescrm.web.routes.transactions.get_sale", new_callable=AsyncMock)
    @patch("salescrm.web.routes.transactions.get_session")
    def test_other_customers_transaction_forbidden(
        self, mock_get_session, mock_get_sale, customer_user, mock_db_session
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_sale.return_value = Sale(transno="T7", salesdate=date(2024, 3, 15), custno="C0002")

        assert _client(customer_user).get("/api/transactions/T7").status_code == 403
