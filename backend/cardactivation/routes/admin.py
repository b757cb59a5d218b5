"""
Card Activation Backend — Admin Route Handlers
================================================

What:  POST /admin/login (issue a bearer token) and POST /admin/update-fees
       (replace the fee ledger; bearer token required).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.dependencies import (
    get_client_ip,
    get_db_session,
    get_session_service,
    require_admin,
)
from cardactivation.schemas.admin import LoginRequest, LoginResponse, SessionClaims
from cardactivation.schemas.common import ErrorResponse
from cardactivation.schemas.fees import FeeUpdateRequest, FeeUpdateResponse
from cardactivation.services.admin_service import admin_credential_service
from cardactivation.services.fee_service import fee_ledger_service
from cardactivation.services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in as an admin and receive a bearer token",
)
async def login(
    payload: Optional[LoginRequest] = Body(default=None),
    client_ip: str = Depends(get_client_ip),
    sessions: SessionService = Depends(get_session_service),
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """
    Verify credentials, record the caller IP on the principal and return a
    token valid for one hour. Unknown user and wrong password are
    indistinguishable to the caller.
    """
    payload = payload or LoginRequest()
    admin = await admin_credential_service.login(
        db=db,
        username=payload.username,
        password=payload.password,
        client_ip=client_ip,
    )
    token = sessions.issue(str(admin.id), admin.username)
    return LoginResponse(token=token)


@router.post(
    "/update-fees",
    response_model=FeeUpdateResponse,
    responses={
        400: {"description": "Missing or non-numeric fee values", "model": ErrorResponse},
        401: {"description": "Missing, malformed, invalid or expired token", "model": ErrorResponse},
        500: {"description": "Fees could not be stored", "model": ErrorResponse},
    },
    summary="Replace the fee ledger",
)
async def update_fees(
    payload: Optional[FeeUpdateRequest] = Body(default=None),
    admin: SessionClaims = Depends(require_admin),
    client_ip: str = Depends(get_client_ip),
    db: AsyncSession = Depends(get_db_session),
) -> FeeUpdateResponse:
    payments = await fee_ledger_service.replace(
        db=db,
        request=payload or FeeUpdateRequest(),
        admin=admin,
        client_ip=client_ip,
    )
    return FeeUpdateResponse(payments=payments)
