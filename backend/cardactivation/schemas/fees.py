"""
Card Activation Backend — Fee Ledger Schemas
==============================================

What:  Request body for POST /admin/update-fees and the fee list returned by
       both fee endpoints.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import ConfigDict, Field

from cardactivation.schemas.activation import CamelModel


class FeeUpdateRequest(CamelModel):
    """Raw values; FeeLedgerService coerces them to numbers."""
    vat: Optional[Any] = Field(default=None)
    card_activation: Optional[Any] = Field(default=None)
    card_maintenance: Optional[Any] = Field(default=None)
    secure_connection: Optional[Any] = Field(default=None)


class FeeItem(CamelModel):
    """
    One fee line as the frontend renders it.

    Serialized as {"label": ..., "price": ..., "updatedAt": ...}.
    """
    label: str = Field(description="Canonical fee label")
    price: float = Field(description="Fee amount")
    updated_at: Optional[datetime] = Field(default=None, description="Last replace time (UTC)")

    model_config = ConfigDict(from_attributes=True)


class FeeListResponse(CamelModel):
    success: bool = Field(default=True)
    payments: List[FeeItem] = Field(description="Current fee line items")


class FeeUpdateResponse(CamelModel):
    success: bool = Field(default=True)
    message: str = Field(default="Fees updated successfully")
    payments: List[FeeItem] = Field(description="The four line items just written")
