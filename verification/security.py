"""Security utilities for guest verification."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt

from verification.config import VerificationConfig
from verification.exceptions import VerificationException


def generate_code(length: int = 6) -> str:
    """Uniform numeric code over the full ``length``-digit range (no leading zero)."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def generate_ticket() -> str:
    # 32 hex chars
    return secrets.token_hex(16)


def codes_match(supplied: str, expected: str) -> bool:
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def create_access_token(
    config: VerificationConfig, subject: str, guest_profile_id: str
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": subject,
        "type": "access",
        "role": "guest",
        "guest_profile_id": guest_profile_id,
        "exp": expire,
        "iat": now,
        "jti": uuid4().hex,
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(config: VerificationConfig, token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError as exc:
        raise VerificationException("Invalid token", status_code=401, reason="invalid_token") from exc
