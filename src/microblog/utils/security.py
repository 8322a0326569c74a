"""Security utilities for password hashing and remember tokens."""

import hashlib
import hmac
import secrets

import bcrypt

from microblog.config import get_settings

# 16 random bytes, i.e. 128 bits of entropy
REMEMBER_TOKEN_BYTES = 16


def hash_password(password: str) -> str:
    """Hash a plain text password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a hashed password."""
    password_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def new_remember_token() -> str:
    """Return a fresh URL-safe random token for "remember me" cookies."""
    return secrets.token_urlsafe(REMEMBER_TOKEN_BYTES)


def encrypt(token: str | None) -> str:
    """Return the storable digest of a remember token.

    HMAC-SHA256 keyed with the application secret. The digest is
    deterministic for a given secret; ``find_by_remember_token`` relies on it.

    Args:
        token: Raw token as handed to the client. ``None`` digests as "".

    Returns:
        Hex digest (64 characters)
    """
    key = get_settings().secret_key.encode("utf-8")
    message = ("" if token is None else str(token)).encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()
