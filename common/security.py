"""
Neon Market - Security Utilities
==================================
JWT tokens, password hashing, session ids and cookie settings.
"""

import hmac
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError

from config.settings import (
    SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES,
    SESSION_MAX_AGE_SECONDS, PASSWORD_HASH_ITERATIONS,
)
from common.helpers import now_utc

logger = logging.getLogger("neonmarket.security")

AUTH_COOKIE = "auth_token"
SESSION_COOKIE = "session_id"


# ==========================================
# Passwords (PBKDF2-HMAC-SHA256)
# ==========================================

def hash_password(password: str) -> str:
    """Return 'pbkdf2_sha256$iterations$salt$hash'."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"pbkdf2_sha256${PASSWORD_HASH_ITERATIONS}${salt}${digest}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algorithm, iterations, salt, expected = stored.split("$")
    except (ValueError, AttributeError):
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations),
    ).hex()
    return hmac.compare_digest(digest, expected)


# ==========================================
# JWT Tokens
# ==========================================

def create_token(data: dict) -> str:
    """Create JWT auth token."""
    to_encode = data.copy()
    to_encode["exp"] = now_utc() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode a JWT token. Returns payload or None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


# ==========================================
# Browser Sessions
# ==========================================

def new_session_id() -> str:
    return secrets.token_urlsafe(32)


# ==========================================
# Cookie Helpers
# ==========================================

def get_cookie_kwargs(max_age: int = ACCESS_TOKEN_EXPIRE_MINUTES * 60) -> dict:
    """Standard cookie settings for auth and session cookies."""
    from config.settings import COOKIE_SECURE, COOKIE_SAMESITE
    return dict(
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
        max_age=max_age,
    )


def get_session_cookie_kwargs() -> dict:
    return get_cookie_kwargs(max_age=SESSION_MAX_AGE_SECONDS)
