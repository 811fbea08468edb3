"""FastAPI web app for SalesCRM."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from salescrm.config import get_config
from salescrm.core.logging import configure_logging
from salescrm.db.connection import close_db
from salescrm.exceptions import CustomerNotFoundError, FetchError, RecordValidationError
from salescrm.startup_validation import StartupValidationError, run_startup_validation
from salescrm.web.routes import auth, customers, dashboard, health, profile, reports, transactions

# Initialize structured logging
configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await run_startup_validation()
    except StartupValidationError as exc:
        logger.error("startup_validation_failed", error=str(exc))
        if get_config().environment == "production":
            raise
    yield
    await close_db()


app = FastAPI(
    title="SalesCRM",
    description="Customer records, sales dashboards and printable reports",
    version="1.0.0",
    lifespan=lifespan,
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise

        logger.info("request_completed", status_code=response.status_code)
        return response


app.add_middleware(RequestLoggingMiddleware)

Instrumentator().instrument(app).expose(app)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Turn redirect-style HTTPExceptions (login required) into real redirects."""
    if exc.status_code in (301, 302, 303, 307, 308) and exc.headers and "Location" in exc.headers:
        return RedirectResponse(url=exc.headers["Location"], status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    logger.error("fetch_failed", operation=exc.operation, detail=exc.detail, cause=repr(exc.__cause__))
    return JSONResponse(
        status_code=502,
        content={"detail": "Failed to load data. Please try again."},
    )


@app.exception_handler(RecordValidationError)
async def validation_error_handler(request: Request, exc: RecordValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc), "field": exc.field})


@app.exception_handler(CustomerNotFoundError)
async def not_found_handler(request: Request, exc: CustomerNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(customers.router)
app.include_router(transactions.router)
app.include_router(profile.router)
app.include_router(reports.router)
app.include_router(health.router)
