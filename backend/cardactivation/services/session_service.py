"""
Card Activation Backend — Admin Session Tokens
================================================

What:  Issues and verifies signed, time-limited bearer tokens for admins.
How:   PyJWT with an HMAC algorithm (HS256 by default). Claims are the
       principal id and username plus iat/exp. Tokens are stateless: there is
       no revocation list, expiry is the only way a token stops working, and
       issuing a new token leaves older ones valid.

State machine:
    Anonymous ──(login success)──▶ Authenticated(token, exp)
    Authenticated ──(now >= exp)──▶ Anonymous
"""

import logging
import time
from typing import Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from cardactivation.config import Settings
from cardactivation.exceptions import AuthError
from cardactivation.schemas.admin import SessionClaims

logger = logging.getLogger(__name__)

MSG_MISSING = "No token provided"
MSG_MALFORMED = "Malformed token header"
MSG_INVALID = "Invalid or expired token"

BEARER_SCHEME = "Bearer"


class SessionService:
    """
    Token issuer/verifier bound to one secret.

    Args:
        secret:       HMAC signing key
        algorithm:    HS256, HS384 or HS512
        ttl_seconds:  lifetime of issued tokens (default one hour)
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl_seconds=settings.session_ttl_seconds,
        )

    def issue(self, principal_id: str, username: str, now: Optional[int] = None) -> str:
        """Sign a token for the principal that expires `ttl_seconds` after `now`."""
        issued_at = int(time.time()) if now is None else int(now)
        payload = {
            "id": str(principal_id),
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionClaims:
        """
        Check signature and expiry and return the decoded identity.

        Raises:
            AuthError("invalid"): bad signature, wrong algorithm, expired,
                                  or required claims missing
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"]},
            )
            return SessionClaims.model_validate(payload)
        except jwt.ExpiredSignatureError:
            raise AuthError("invalid", MSG_INVALID, context={"cause": "expired"})
        except (jwt.InvalidTokenError, PydanticValidationError) as e:
            logger.debug("Rejected bearer token: %s", type(e).__name__)
            raise AuthError("invalid", MSG_INVALID, context={"cause": type(e).__name__})

    def verify_header(self, authorization: Optional[str]) -> SessionClaims:
        """
        Parse an Authorization header value and verify its token.

        Raises:
            AuthError("missing"):   header absent or empty
            AuthError("malformed"): not exactly "Bearer <token>"
            AuthError("invalid"):   see verify()
        """
        if not authorization:
            raise AuthError("missing", MSG_MISSING)

        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
            raise AuthError("malformed", MSG_MALFORMED)

        return self.verify(parts[1])
