"""
Card Activation Backend — Field Validators
============================================

What:  Pure validation/coercion helpers shared by the activation and fee
       services. No I/O, no database access.
How:   Each helper either returns the normalized value or raises
       ValidationError with a reason tag and the user-facing message.

Digit rules use an explicit ASCII class ([0-9]) rather than \\d, which would
also accept other Unicode decimal digits.
"""

import math
import re
from typing import Any, FrozenSet

from cardactivation.exceptions import ValidationError

SUPPORTED_CURRENCIES: FrozenSet[str] = frozenset(
    {"USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY", "INR", "ZAR"}
)

DAILY_LIMIT_MIN = 0
DAILY_LIMIT_MAX = 5000

_SIX_DIGITS = re.compile(r"[0-9]{6}")
_FOUR_DIGITS = re.compile(r"[0-9]{4}")
_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")

# Checkbox-style consent values accepted in addition to JSON true
_CONSENT_STRINGS = frozenset({"true", "on", "yes", "1"})

MSG_DIGITS_REQUIRED = "Please provide the last 6 digits of your card."
MSG_DIGITS_FORMAT = "The last 6 digits must be exactly 6 numbers."
MSG_LIMIT_RANGE = "Daily limit must be between 0 and 5000."
MSG_CURRENCY = "Unsupported currency selected."
MSG_PIN = "PIN must be exactly 4 digits."
MSG_TERMS = "You must accept the terms to proceed."


def is_blank(value: Any) -> bool:
    """None, or a string with nothing but whitespace."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _as_text(value: Any) -> str | None:
    # Booleans are ints in Python; str(True) would never match anyway,
    # but they are not a meaningful digit string either.
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def validate_last_six_digits(value: Any) -> str:
    """
    Digit Validator.

    Returns the 6-character string on success.

    Raises:
        ValidationError("required"): value is absent
        ValidationError("format"):   not exactly 6 ASCII digits
    """
    if is_blank(value):
        raise ValidationError("required", MSG_DIGITS_REQUIRED, field="lastSixDigits")
    text = _as_text(value)
    if text is None or not _SIX_DIGITS.fullmatch(text):
        raise ValidationError("format", MSG_DIGITS_FORMAT, field="lastSixDigits")
    return text


def coerce_daily_limit(value: Any) -> int:
    """
    Integer in [0, 5000].

    Accepts ints, floats with no fractional part and strings of an optional
    sign followed by digits. Booleans are rejected.
    """
    limit: int | None = None
    if isinstance(value, bool):
        limit = None
    elif isinstance(value, int):
        limit = value
    elif isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            limit = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if _INTEGER_TEXT.fullmatch(text):
            limit = int(text)

    if limit is None or not DAILY_LIMIT_MIN <= limit <= DAILY_LIMIT_MAX:
        raise ValidationError(
            "range",
            MSG_LIMIT_RANGE,
            field="dailyLimit",
            context={"min": DAILY_LIMIT_MIN, "max": DAILY_LIMIT_MAX},
        )
    return limit


def validate_currency(value: Any) -> str:
    if not isinstance(value, str) or value not in SUPPORTED_CURRENCIES:
        raise ValidationError("currency", MSG_CURRENCY, field="currency")
    return value


def validate_pin(value: Any) -> str:
    text = _as_text(value)
    if text is None or not _FOUR_DIGITS.fullmatch(text):
        raise ValidationError("pin", MSG_PIN, field="pin")
    return text


def is_consent(value: Any) -> bool:
    """True for JSON true, integer 1, or a checkbox-style string."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _CONSENT_STRINGS
    return False


def coerce_fee(value: Any, field: str) -> float:
    """
    Finite number from an int, float or numeric string.

    Booleans, blank strings, NaN and infinities are rejected.
    """
    number: float | None = None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            number = None

    if number is None or not math.isfinite(number):
        raise ValidationError("numeric", "Fee values must be numeric", field=field)
    return number
