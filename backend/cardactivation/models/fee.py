"""
Card Activation Backend — Fee Line Item Model
===============================================

What:  ORM model for the `payments` table, the fee ledger shown to end users.
How:   The ledger is always replaced wholesale by FeeLedgerService, so rows
       are only ever inserted and bulk-deleted, never updated in place.

Invariant: after any successful replace or seed the table holds exactly one
row for each label in FEE_LABELS.
"""

import uuid
from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy import DateTime, Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cardactivation.database import Base

VAT_LABEL = "VAT (value added tax)"
CARD_ACTIVATION_LABEL = "Card activation"
CARD_MAINTENANCE_LABEL = "Card maintenance"
SECURE_CONNECTION_LABEL = "3D visa/master/verve secure connection"

# Canonical order; also the tie-breaker when listing rows with equal updated_at
FEE_LABELS: Tuple[str, ...] = (
    VAT_LABEL,
    CARD_ACTIVATION_LABEL,
    CARD_MAINTENANCE_LABEL,
    SECURE_CONNECTION_LABEL,
)


class FeeLineItem(Base):
    """One billable fee line."""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    label: Mapped[str] = mapped_column(String(100), nullable=False)

    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<FeeLineItem(label='{self.label}', price={self.price})>"
