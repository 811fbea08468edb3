"""Session handling for the SalesCRM web UI.

Sessions live in Redis with an in-memory fallback for development when
Redis is unreachable. The session payload carries the resolved role so
routes can authorise without another round trip.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timedelta, timezone

import redis
from fastapi import Cookie, HTTPException

from salescrm.config import get_config
from salescrm.models import UserRole

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"

# In-memory fallback for development when Redis is missing
_memory_sessions: dict[str, dict] = {}

_REDIS_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def get_redis_client() -> redis.Redis:
    """Get Redis client for session storage."""
    return redis.from_url(get_config().auth.redis_url, decode_responses=True)


def _expiry_hours() -> int:
    return get_config().auth.session_expiry_hours


def create_session(
    user_id: str,
    email: str,
    role: UserRole,
    custno: str | None = None,
) -> str:
    """Create a session for an authenticated account and return its token."""
    session_token = secrets.token_urlsafe(32)
    now = datetime.now(timezone.utc)

    session_data = {
        "user_id": user_id,
        "email": email,
        "role": role.value,
        "custno": custno,
        "created_at": now.isoformat(),
        "expires_at": (now + timedelta(hours=_expiry_hours())).isoformat(),
    }

    try:
        get_redis_client().setex(
            f"session:{session_token}", _expiry_hours() * 3600, json.dumps(session_data)
        )
    except _REDIS_ERRORS:
        logger.warning("Redis unavailable, using in-memory session storage")
        _prune_memory_sessions()
        _memory_sessions[session_token] = session_data

    return session_token


def _expired(session_data: dict) -> bool:
    expires_at = datetime.fromisoformat(session_data["expires_at"])
    return datetime.now(timezone.utc) > expires_at


def _prune_memory_sessions() -> None:
    for token in [t for t, data in _memory_sessions.items() if _expired(data)]:
        del _memory_sessions[token]


def validate_session(session_token: str | None) -> dict | None:
    """Return session data for a live token, None otherwise."""
    if not session_token:
        return None

    try:
        redis_client = get_redis_client()
        raw = redis_client.get(f"session:{session_token}")
    except _REDIS_ERRORS:
        session_data = _memory_sessions.get(session_token)
        if session_data is None:
            return None
        if _expired(session_data):
            del _memory_sessions[session_token]
            return None
        return session_data

    if not raw:
        return None

    try:
        session_data = json.loads(raw)
        if _expired(session_data):
            redis_client.delete(f"session:{session_token}")
            return None
        return session_data
    except (json.JSONDecodeError, KeyError, ValueError):
        redis_client.delete(f"session:{session_token}")
        return None


def logout(session_token: str | None) -> None:
    """Invalidate a session token."""
    if not session_token:
        return
    try:
        get_redis_client().delete(f"session:{session_token}")
    except _REDIS_ERRORS:
        _memory_sessions.pop(session_token, None)


def _anonymous_admin() -> dict:
    return {"user_id": None, "email": "default_admin", "role": UserRole.ADMIN.value, "custno": None}


def require_auth(session: str | None = Cookie(default=None)) -> dict:
    """Dependency: the current session, or a redirect to the login page."""
    if get_config().auth.auth_disabled:
        return _anonymous_admin()

    session_data = validate_session(session)
    if not session_data:
        raise HTTPException(
            status_code=307,
            detail="Authentication required",
            headers={"Location": "/login"},
        )
    return session_data


def require_admin(session: str | None = Cookie(default=None)) -> dict:
    """Dependency: like :func:`require_auth` but admin accounts only."""
    session_data = require_auth(session)
    if session_data.get("role") != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="Admin access required")
    return session_data


def require_customer(session: str | None = Cookie(default=None)) -> dict:
    """Dependency: an account linked to a customer record."""
    session_data = require_auth(session)
    if session_data.get("role") != UserRole.CUSTOMER.value or not session_data.get("custno"):
        raise HTTPException(status_code=403, detail="Customer account required")
    return session_data


def ensure_customer_access(session_data: dict, custno: str) -> None:
    """Customers may only read their own records; admins may read any."""
    role = session_data.get("role")
    if role == UserRole.ADMIN.value:
        return
    if role == UserRole.CUSTOMER.value and session_data.get("custno") == custno:
        return
    raise HTTPException(status_code=403, detail="Not allowed to view this customer")


def require_staff(session: str | None = Cookie(default=None)) -> dict:
    """Dependency: admin or plain user accounts; customers go to their profile."""
    session_data = require_auth(session)
    if session_data.get("role") == UserRole.CUSTOMER.value:
        raise HTTPException(
            status_code=307,
            detail="Customer accounts use the profile page",
            headers={"Location": "/customer-profile"},
        )
    return session_data
