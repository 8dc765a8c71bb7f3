from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class TokenExpiredError(TokenError):
    """Raised when a token is well-formed but past its expiry."""


class Role(str, Enum):
    ADMIN = "admin"
    WAITER = "waiter"
    CHEF = "chef"
    CASHIER = "cashier"
    USER = "user"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}

    @classmethod
    def staff(cls) -> tuple[Role, ...]:
        return (cls.WAITER, cls.CHEF, cls.CASHIER)


def create_id_token(
    subject: str,
    *,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed identity token for an authenticated account."""
    settings = get_settings()

    now = datetime.now(UTC)
    ttl = expires_delta if expires_delta is not None else timedelta(
        seconds=settings.id_token_ttl_seconds
    )
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }

    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_id_token(token: str, *, verify_exp: bool = True) -> dict:
    """Decode and validate an identity token.

    With ``verify_exp=False`` the signature is still checked, which lets callers
    hold an identity whose freshness is verified separately.
    """
    settings = get_settings()

    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"], "verify_exp": verify_exp},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc
