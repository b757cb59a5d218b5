"""
Card Activation Backend — Admin Credential Service
====================================================

What:  Seeds the default admin principal and verifies admin logins.
Who:   The startup lifespan and `cardactivation seed-admin` (seed_if_empty),
       POST /admin/login (login).

Login failure is deliberately uniform: an unknown username and a wrong
password raise the same AuthError("invalid") with the same message.
"""

import logging
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardactivation.exceptions import AuthError, PersistenceError, ValidationError
from cardactivation.models.admin import AdminPrincipal
from cardactivation.security import hash_secret, verify_secret
from cardactivation.services.validation import is_blank

logger = logging.getLogger(__name__)

MSG_INVALID_CREDENTIALS = "Invalid credentials"


class AdminCredentialService:

    async def seed_if_empty(
        self,
        db: AsyncSession,
        username: str,
        password: str,
    ) -> Optional[AdminPrincipal]:
        """
        Create the first admin when the admins table is empty.

        The password is stored only as an argon2 hash and is never logged.

        Returns:
            The new principal, or None when an admin already exists.
        """
        try:
            count = (await db.execute(select(func.count(AdminPrincipal.id)))).scalar() or 0
            if count:
                logger.info("Admin user exists - no seed needed")
                return None

            admin = AdminPrincipal(username=username, password_hash=hash_secret(password))
            db.add(admin)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to seed admin user: %s", str(e), exc_info=True)
            raise PersistenceError(
                message="Could not create the initial admin user.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Initial admin created: username=%s", username)
        return admin

    async def login(
        self,
        db: AsyncSession,
        username: Any,
        password: Any,
        client_ip: Optional[str] = None,
    ) -> AdminPrincipal:
        """
        Verify credentials and record the caller's IP on success.

        Raises:
            ValidationError("required"): username or password missing
            AuthError("invalid"):        unknown user or wrong password
            PersistenceError:            lookup or IP update failed
        """
        if is_blank(username) or is_blank(password):
            raise ValidationError("required", "Username and password are required")
        if not isinstance(username, str) or not isinstance(password, str):
            raise AuthError("invalid", MSG_INVALID_CREDENTIALS)

        try:
            result = await db.execute(
                select(AdminPrincipal).where(AdminPrincipal.username == username)
            )
            admin = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Login lookup failed: %s", str(e), exc_info=True)
            raise PersistenceError(message="Server error", context={"error_type": type(e).__name__}) from e

        if admin is None or not verify_secret(password, admin.password_hash):
            logger.warning("Failed admin login for username=%s from ip=%s", username, client_ip or "unknown")
            raise AuthError("invalid", MSG_INVALID_CREDENTIALS)

        try:
            admin.ip_address = client_ip or None
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to record admin login IP: %s", str(e), exc_info=True)
            raise PersistenceError(message="Server error", context={"error_type": type(e).__name__}) from e

        logger.info("Admin %s logged in from ip=%s", admin.username, client_ip or "unknown")
        return admin


admin_credential_service = AdminCredentialService()
