"""
Card Activation Backend — Activation Service
==============================================

What:  Validates activation submissions and persists accepted ones.
Who:   Called by the POST /validate-digits and POST /activate handlers.

Validation Order (first failure wins, nothing is written on failure):
    1. presence of all seven fields           → "required"
    2. lastSixDigits is 6 ASCII digits        → "format"
    3. dailyLimit is an integer in [0, 5000]  → "range"
    4. currency is in the supported set       → "currency"
    5. pin is 4 ASCII digits                  → "pin"
    6. accept is a consent value              → "terms"

    String fields are "missing" when None or blank; cardType and holderName
    also count as missing when they are not strings. dailyLimit and accept are
    "missing" only when None, so a limit of 0 or an explicit false reach the
    later, more specific checks.

Persistence:
    One INSERT per accepted submission. The PIN is argon2-hashed before it
    reaches the model; the response never echoes it.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.exceptions import PersistenceError, ValidationError
from cardactivation.models.activation import Activation
from cardactivation.schemas.activation import AckResponse, ActivationRequest
from cardactivation.security import hash_secret
from cardactivation.services.validation import (
    MSG_TERMS,
    coerce_daily_limit,
    is_blank,
    is_consent,
    validate_currency,
    validate_last_six_digits,
    validate_pin,
)

logger = logging.getLogger(__name__)

MSG_ALL_REQUIRED = "All fields are required to activate your card."


class ActivationService:
    """
    Stateless; receives the session per call.

    Methods:
        validate_digits(): standalone Digit Validator endpoint logic
        build_record():    ordered validation + ActivationRecord construction
        activate():        build_record() followed by a single durable write
    """

    def validate_digits(self, last_six_digits: object) -> AckResponse:
        validate_last_six_digits(last_six_digits)
        return AckResponse(message="Digits validated successfully")

    def build_record(
        self,
        submission: ActivationRequest,
        user_ip: Optional[str] = None,
    ) -> Activation:
        """
        Run the six validation steps in order and build an unsaved Activation.

        Raises:
            ValidationError: carrying the reason of the first failing step.
        """
        # ── Step 1: presence ──────────────────────────────────────────────
        text_fields = (
            submission.card_type,
            submission.last_six_digits,
            submission.holder_name,
            submission.currency,
            submission.pin,
        )
        free_text = (submission.card_type, submission.holder_name)
        if (
            any(is_blank(value) for value in text_fields)
            or any(not isinstance(value, str) for value in free_text)
            or submission.daily_limit is None
            or submission.accept is None
        ):
            raise ValidationError("required", MSG_ALL_REQUIRED)

        # ── Steps 2-5: field formats ──────────────────────────────────────
        last_six = validate_last_six_digits(submission.last_six_digits)
        daily_limit = coerce_daily_limit(submission.daily_limit)
        currency = validate_currency(submission.currency)
        pin = validate_pin(submission.pin)

        # ── Step 6: terms ─────────────────────────────────────────────────
        if not is_consent(submission.accept):
            raise ValidationError("terms", MSG_TERMS, field="accept")

        return Activation(
            card_type=submission.card_type.strip(),
            last_six_digits=last_six,
            holder_name=submission.holder_name.strip(),
            currency=currency,
            daily_limit=daily_limit,
            accept=True,
            pin_hash=hash_secret(pin),
            user_ip=user_ip or None,
        )

    async def activate(
        self,
        db: AsyncSession,
        submission: ActivationRequest,
        user_ip: Optional[str] = None,
    ) -> AckResponse:
        """
        Validate, then persist exactly one Activation row.

        Raises:
            ValidationError: invalid submission (→ 400), nothing written
            PersistenceError: the insert failed (→ 500)
        """
        record = self.build_record(submission, user_ip=user_ip)

        try:
            db.add(record)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to store activation: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Unexpected error occurred.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info(
            "Card activated: id=%s card_type=%s currency=%s from ip=%s",
            record.id,
            record.card_type,
            record.currency,
            user_ip or "unknown",
        )
        return AckResponse(message="Card activated successfully")


activation_service = ActivationService()
