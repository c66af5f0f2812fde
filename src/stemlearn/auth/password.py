"""
Password hashing and validation using argon2id.

Stored credentials are full argon2 hash strings; verification is constant
time inside argon2-cffi and never raises on mismatch.
"""

from __future__ import annotations

import argon2

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,  # argon2id
)


class PasswordStrengthError(ValueError):
    """Raised when a password does not meet strength requirements."""


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full hash string."""
    return _hasher.hash(password)


def is_password_hash(value: str | None) -> bool:
    """True if ``value`` is already an argon2 hash rather than plain text."""
    return bool(value) and value.startswith("$argon2")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify a password against its argon2id hash.

    Returns True if the password matches. Never raises on mismatch.
    """
    if not password_hash:
        return False
    try:
        return _hasher.verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """Check if the hash needs to be updated (parameters changed)."""
    return _hasher.check_needs_rehash(password_hash)


def validate_password_strength(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> None:
    """
    Validate password meets the registration rules.

    Raises PasswordStrengthError if the password is too weak:
    empty or whitespace-only, shorter than ``min_length`` or longer than
    128 characters.
    """
    if not password or not password.strip():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)
    if len(password) < min_length:
        msg = f"Password must be at least {min_length} characters"
        raise PasswordStrengthError(msg)
    if len(password) > MAX_PASSWORD_LENGTH:
        msg = f"Password must not exceed {MAX_PASSWORD_LENGTH} characters"
        raise PasswordStrengthError(msg)
