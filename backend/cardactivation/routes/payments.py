"""
Card Activation Backend — Public Fee List
===========================================

What:  GET /api/payments returns the current fee ledger.
How:   Delegates to FeeLedgerService.list_fees(), which seeds four
       zero-priced items if the ledger is still empty.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.dependencies import get_db_session
from cardactivation.schemas.common import ErrorResponse
from cardactivation.schemas.fees import FeeListResponse
from cardactivation.services.fee_service import fee_ledger_service

router = APIRouter(prefix="/api", tags=["Payments"])


@router.get(
    "/payments",
    response_model=FeeListResponse,
    responses={
        500: {"description": "Fees could not be read", "model": ErrorResponse},
    },
    summary="List current fees",
)
async def list_payments(db: AsyncSession = Depends(get_db_session)) -> FeeListResponse:
    payments = await fee_ledger_service.list_fees(db)
    return FeeListResponse(payments=payments)
