"""
Card Activation Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for the three failure families.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and a `{"success": false, "message": ...}` body.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    CardActivationError (base)
    ├── ValidationError    → 400 Bad Request (client can fix)
    ├── AuthError          → 401 Unauthorized
    └── PersistenceError   → 500 Internal Server Error (store failure)

`reason` is a short machine-oriented tag (e.g. "format", "range", "missing")
used by tests and logs. It is not part of the HTTP response.
"""

from typing import Any, Dict, Optional


class CardActivationError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CardActivationError):
    """
    Raised when client input fails validation.

    Reasons used across the codebase:
        required  a mandatory field is absent
        format    lastSixDigits is not exactly 6 ASCII digits
        range     dailyLimit is not an integer in [0, 5000]
        currency  currency is outside the supported set
        pin       pin is not exactly 4 ASCII digits
        terms     accept is not a consent value
        numeric   a fee value does not coerce to a finite number
        body      the request body could not be parsed
    """

    def __init__(
        self,
        reason: str,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.reason = reason
        self.field = field


class AuthError(CardActivationError):
    """
    Raised when a credential is missing, malformed, wrong or expired.

    Reasons:
        missing    no Authorization header was presented
        malformed  the header is not "Bearer <token>"
        invalid    bad credentials, bad signature or expired token

    Login failures always use "invalid" with the same message whether the
    username or the password was wrong.
    """

    def __init__(
        self,
        reason: str,
        message: str = "Authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class PersistenceError(CardActivationError):
    """
    Raised when the data store is unreachable or a read/write fails.

    The message is a generic, caller-safe sentence. Driver errors, SQL and
    constraint names go into `context` and are only logged server-side.
    Not retried at the request level; only Database.connect() retries.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
