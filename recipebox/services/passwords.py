"""Password hashing and verification for stored user credentials."""

from __future__ import annotations

import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def is_hashed(stored: str | None) -> bool:
    return bool(stored) and stored.startswith(_PREFIX)


def verify_password(password: str, stored: str | None) -> bool:
    stored = stored or ""
    if is_hashed(stored):
        hashed = stored[len(_PREFIX) :]
        try:
            return _ph.verify(hashed, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    # Clear-text value from an older data file.
    if not stored:
        return False
    return secrets.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))


def needs_rehash(stored: str | None) -> bool:
    if not is_hashed(stored):
        return True
    return _ph.check_needs_rehash(stored[len(_PREFIX) :])
