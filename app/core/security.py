"""
Password hashing (bcrypt), legacy credential checks and JWT access tokens.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def is_password_hash(stored: str | None) -> bool:
    """True when *stored* is a hash passlib recognises (``$2b$...`` etc.)."""
    if not stored:
        return False
    return pwd_context.identify(stored, required=False) is not None


def check_credential(plain: str, stored: str | None) -> tuple[bool, bool]:
    """Check *plain* against a stored credential.

    Accounts created before hashing was introduced still hold their
    password in plaintext; those are compared in constant time.

    Returns ``(valid, needs_rehash)``.  ``needs_rehash`` is set for a
    matching legacy plaintext value or an outdated hash, so the caller
    can persist a fresh hash.
    """
    if not stored:
        return False, False
    if is_password_hash(stored):
        if not verify_password(plain, stored):
            return False, False
        return True, pwd_context.needs_update(stored)
    valid = secrets.compare_digest(plain.encode("utf-8"), stored.encode("utf-8"))
    return valid, valid


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    subject: str | Any,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "type": "access"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if *access* token is valid, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
        if payload.get("type") != "access":
            return None
        return payload
    except JWTError:
        return None
