"""
Card Activation Backend — Fee Ledger Service
==============================================

What:  Maintains the four canonical fee line items.
Who:   POST /admin/update-fees (replace), GET /api/payments (list), and the
       startup lifespan / `init-db` CLI command (seed_if_empty).

Operations:
    replace()        delete every row, insert four fresh rows stamped with one
                     updated_at; audit-logged with the admin identity and IP
    list_fees()      rows ordered by updated_at DESC then canonical label order;
                     seeds four zero-priced rows when the table is empty
    seed_if_empty()  the same seeding, run explicitly once at startup so
                     concurrent first readers don't both insert

Consistency:
    Within one request the delete and inserts share a transaction (committed
    by the session dependency). Concurrent replace() calls are not
    linearizable; the last commit wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.exceptions import PersistenceError, ValidationError
from cardactivation.models.fee import (
    CARD_ACTIVATION_LABEL,
    CARD_MAINTENANCE_LABEL,
    FEE_LABELS,
    SECURE_CONNECTION_LABEL,
    VAT_LABEL,
    FeeLineItem,
)
from cardactivation.schemas.admin import SessionClaims
from cardactivation.schemas.fees import FeeItem, FeeUpdateRequest
from cardactivation.services.validation import coerce_fee

logger = logging.getLogger(__name__)

_LABEL_ORDER = {label: index for index, label in enumerate(FEE_LABELS)}


def _sorted(items: List[FeeLineItem]) -> List[FeeLineItem]:
    # Newest first; rows written together fall back to canonical order
    return sorted(
        items,
        key=lambda item: (-item.updated_at.timestamp(), _LABEL_ORDER.get(item.label, len(FEE_LABELS))),
    )


class FeeLedgerService:

    async def replace(
        self,
        db: AsyncSession,
        request: FeeUpdateRequest,
        admin: Optional[SessionClaims] = None,
        client_ip: Optional[str] = None,
    ) -> List[FeeItem]:
        """
        Replace the whole ledger with the four submitted values.

        Raises:
            ValidationError("required"): any of the four values is missing
            ValidationError("numeric"):  a value is not a finite number
            PersistenceError:            delete or insert failed
        """
        raw: Dict[str, Any] = {
            "vat": request.vat,
            "cardActivation": request.card_activation,
            "cardMaintenance": request.card_maintenance,
            "secureConnection": request.secure_connection,
        }
        missing = [name for name, value in raw.items() if value is None]
        if missing:
            raise ValidationError(
                "required",
                "All fee fields are required",
                context={"missing": missing},
            )

        prices = {name: coerce_fee(value, name) for name, value in raw.items()}

        now = datetime.now(timezone.utc)
        items = [
            FeeLineItem(label=VAT_LABEL, price=prices["vat"], updated_at=now),
            FeeLineItem(label=CARD_ACTIVATION_LABEL, price=prices["cardActivation"], updated_at=now),
            FeeLineItem(label=CARD_MAINTENANCE_LABEL, price=prices["cardMaintenance"], updated_at=now),
            FeeLineItem(label=SECURE_CONNECTION_LABEL, price=prices["secureConnection"], updated_at=now),
        ]

        try:
            await db.execute(delete(FeeLineItem))
            db.add_all(items)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to replace fee ledger: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Error occurred while updating fees.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info(
            "Fees updated by IP: %s by Admin ID: %s (%s) with data: %s",
            client_ip or "unknown",
            admin.id if admin else None,
            admin.username if admin else None,
            {item.label: item.price for item in items},
        )
        return [FeeItem.model_validate(item) for item in items]

    async def list_fees(self, db: AsyncSession) -> List[FeeItem]:
        """
        Current ledger, seeding four zero-priced items if it is empty.

        Raises:
            PersistenceError: query or seed insert failed
        """
        try:
            result = await db.execute(select(FeeLineItem))
            items = list(result.scalars().all())
            if not items:
                items = await self._seed(db)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to fetch fee ledger: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Error occurred while fetching payments.",
                context={"error_type": type(e).__name__},
            ) from e

        return [FeeItem.model_validate(item) for item in _sorted(items)]

    async def seed_if_empty(self, db: AsyncSession) -> bool:
        """
        Insert the zero-priced canonical items when the ledger is empty.

        Returns True when rows were inserted. Safe to call repeatedly.
        """
        try:
            count = (await db.execute(select(func.count(FeeLineItem.id)))).scalar() or 0
            if count:
                return False
            await self._seed(db)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to seed fee ledger: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Error occurred while seeding payments.",
                context={"error_type": type(e).__name__},
            ) from e
        return True

    async def _seed(self, db: AsyncSession) -> List[FeeLineItem]:
        now = datetime.now(timezone.utc)
        items = [FeeLineItem(label=label, price=0.0, updated_at=now) for label in FEE_LABELS]
        db.add_all(items)
        await db.flush()
        logger.info("Fee ledger was empty; seeded %d zero-priced items", len(items))
        return items


fee_ledger_service = FeeLedgerService()
