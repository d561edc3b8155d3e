"""Password hashing helpers."""

from __future__ import annotations

from functools import lru_cache

from bazaar.extensions import bcrypt


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Validate a plaintext password against a stored hash.

    A missing or malformed hash is a plain mismatch, not an error.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.check_password_hash(hashed_password, plain_password)
    except ValueError:
        # bcrypt raises "Invalid salt" for hashes it cannot parse
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("bazaar-timing-equalizer")


def burn_password_check(plain_password: str) -> None:
    """Spend one bcrypt comparison so unknown accounts cost as much as known ones."""
    verify_password(plain_password or "x", _dummy_hash())
