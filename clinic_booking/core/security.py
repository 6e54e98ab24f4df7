# clinic_booking/core/security.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from clinic_booking.core.config import settings


class TokenType(str, Enum):
    ACCESS = "access"


ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    *,
    subject: str,                # the user id as str
    role: Optional[str] = None,  # "patient" | "doctor" | "admin"
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Create a short-lived Bearer access token.

    The identity provider owns issuance in production; this helper exists for
    local tooling and the test-suite.
    """
    exp_minutes = expires_minutes or settings.ACCESS_EXPIRES_MIN
    to_encode: Dict[str, Any] = {
        "sub": subject,
        "type": TokenType.ACCESS.value,
        "iat": int(_utcnow().timestamp()),
        "exp": int((_utcnow() + timedelta(minutes=exp_minutes)).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    if role:
        to_encode["role"] = role

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=ALGORITHM)


class InvalidTokenError(Exception):
    """Raised when a token is missing/invalid/expired or claims are malformed."""


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises InvalidTokenError on failure.
    """
    if not token:
        raise InvalidTokenError("missing_token")
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError as exc:
        # JWTError covers expired signature, invalid signature, bad format, etc.
        raise InvalidTokenError("invalid_token") from exc

    if "sub" not in payload or "type" not in payload:
        raise InvalidTokenError("invalid_claims")

    return payload


def is_access_token(payload: Dict[str, Any]) -> bool:
    return payload.get("type") == TokenType.ACCESS.value
