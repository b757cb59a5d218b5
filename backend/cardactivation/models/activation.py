"""
Card Activation Backend — Activation SQLAlchemy Model
=======================================================

What:  ORM model for the `activations` table: one row per accepted
       card-activation submission.
Who:   Written by ActivationService; never updated or deleted by any route.

Column notes:
    - card_type, holder_name: unbounded free text (Text, not VARCHAR(n)).
    - pin_hash: argon2 hash of the 4-digit PIN. The plaintext PIN is never
      stored and never returned.
    - user_ip: best-effort client address from the Client IP Extractor,
      kept for audit only.
    - created_at: UTC, set once at insert.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cardactivation.database import Base


class Activation(Base):
    """A validated card activation. Immutable after insert."""

    __tablename__ = "activations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    card_type: Mapped[str] = mapped_column(Text, nullable=False)

    # Exactly 6 ASCII digits, kept as text to preserve leading zeros
    last_six_digits: Mapped[str] = mapped_column(String(6), nullable=False)

    holder_name: Mapped[str] = mapped_column(Text, nullable=False)

    # ISO 4217 code from the supported set
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    daily_limit: Mapped[int] = mapped_column(Integer, nullable=False)

    accept: Mapped[bool] = mapped_column(Boolean, nullable=False)

    pin_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    user_ip: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_activations_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Activation(id={self.id}, card_type='{self.card_type}', "
            f"last_six_digits='{self.last_six_digits}', created_at='{self.created_at}')>"
        )
