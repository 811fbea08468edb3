"""Unit tests for SalesCRM web route modules.

Structure:
    tests/unit/web/
    ├── test_auth.py                  # Session store and auth dependencies
    ├── test_app.py                   # Error mapping on the assembled app
    ├── test_routes_auth.py           # Login / signup / logout
    ├── test_routes_customers.py      # Customer management API
    ├── test_routes_transactions.py   # Transaction totals and detail
    ├── test_routes_dashboard.py      # Dashboard, profile and health
    └── test_routes_reports.py        # Printable reports

Testing pattern:
    - Use FastAPI's TestClient for route testing
    - Mock database sessions and service calls
    - Override auth dependencies to pick the caller's role
"""
