"""Password hashing and verification with bcrypt."""

from functools import lru_cache

import bcrypt

from src.config import get_settings

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    """True if the UTF-8 encoding exceeds what bcrypt can hash."""
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain-text password to hash

    Returns:
        Bcrypt hash string (salt embedded)

    Raises:
        ValueError: If the password is longer than MAX_PASSWORD_BYTES
    """
    if password_too_long(password):
        raise ValueError(f"Password longer than {MAX_PASSWORD_BYTES} bytes")
    rounds = get_settings().bcrypt_rounds
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash.

    Malformed hashes and passwords that could never have been hashed
    verify as False rather than raising.
    """
    if password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_hash() -> str:
    """A throwaway hash for running bcrypt when no account matches."""
    return hash_password("not-a-real-password")
