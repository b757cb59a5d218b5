"""
Card Activation Backend — Activation Route Handlers
=====================================================

What:  POST /validate-digits and POST /activate.
How:   Thin handlers: pull the body and client IP, delegate to
       ActivationService, return its acknowledgement. ValidationError (400)
       and PersistenceError (500) are formatted by the global handlers.

Request Flow (POST /activate):
    1. Body parsed into ActivationRequest (all fields optional, untyped)
    2. ActivationService validates in a fixed order
    3. One INSERT into activations (PIN hashed)
    4. {"success": true, "message": "Card activated successfully"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.dependencies import get_client_ip, get_db_session
from cardactivation.schemas.activation import AckResponse, ActivationRequest, DigitsRequest
from cardactivation.schemas.common import ErrorResponse
from cardactivation.services.activation_service import activation_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Activation"])


@router.post(
    "/validate-digits",
    response_model=AckResponse,
    responses={
        400: {"description": "Missing or malformed digits", "model": ErrorResponse},
    },
    summary="Validate the last 6 digits of a card",
)
async def validate_digits(
    payload: Optional[DigitsRequest] = Body(default=None),
) -> AckResponse:
    """Acknowledge a well-formed 6-digit suffix. Nothing is stored."""
    payload = payload or DigitsRequest()
    return activation_service.validate_digits(payload.last_six_digits)


@router.post(
    "/activate",
    response_model=AckResponse,
    responses={
        400: {"description": "First failing validation rule", "model": ErrorResponse},
        500: {"description": "Activation could not be stored", "model": ErrorResponse},
    },
    summary="Activate a card",
    description=(
        "Validates the submission (presence, digits, daily limit, currency, PIN, "
        "terms, in that order) and stores one activation record. The PIN is "
        "stored hashed and never echoed."
    ),
)
async def activate_card(
    payload: Optional[ActivationRequest] = Body(default=None),
    client_ip: str = Depends(get_client_ip),
    db: AsyncSession = Depends(get_db_session),
) -> AckResponse:
    return await activation_service.activate(
        db=db,
        submission=payload or ActivationRequest(),
        user_ip=client_ip,
    )
