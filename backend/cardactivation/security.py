"""Secret hashing helpers (admin passwords and activation PINs)."""

from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc

_ph = PasswordHasher()


def hash_secret(secret: str) -> str:
    """Return a salted argon2 hash of `secret`."""
    return _ph.hash(secret)


def verify_secret(secret: str, stored_hash: str | None) -> bool:
    """Constant-time check of `secret` against a stored argon2 hash."""
    if not stored_hash:
        return False
    try:
        return _ph.verify(stored_hash, secret)
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False
