"""
Card Activation Backend — FastAPI Dependencies
================================================

What:  Per-request providers injected with Depends():
       - get_db_session:    AsyncSession from app.state.database
       - get_session_service: the app's SessionService
       - get_client_ip:     best-effort caller address
       - require_admin:     verified SessionClaims or AuthError (→ 401)
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.database import Database
from cardactivation.exceptions import PersistenceError
from cardactivation.middleware.client_ip import client_ip_from_request
from cardactivation.schemas.admin import SessionClaims
from cardactivation.services.session_service import SessionService


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "database", None)
    if database is None or not database.is_connected:
        raise PersistenceError(message="Database is not connected.")
    return database


async def get_db_session(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request, rolled back if the handler raises.

    Services commit their own writes. This teardown can run after the
    response has been sent.

    Example usage in a route:
        @router.get("/api/payments")
        async def list_payments(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with database.session() as session:
        yield session


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service


def get_client_ip(request: Request) -> str:
    ip = getattr(request.state, "client_ip", None)
    if ip is None:
        ip = client_ip_from_request(request)
    return ip


def require_admin(
    request: Request,
    sessions: SessionService = Depends(get_session_service),
) -> SessionClaims:
    """
    Guard for admin-only routes.

    Raises:
        AuthError: missing, malformed, invalid or expired bearer token
    """
    return sessions.verify_header(request.headers.get("Authorization"))
