import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

ALGO = "HS256"

ACCESS = "access"
REFRESH = "refresh"


class InvalidToken(Exception):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_jti() -> str:
    return secrets.token_hex(16)  # 32 chars


def _encode(user_id: str, token_type: str, ttl: timedelta, **extra: Any) -> str:
    now = _now()
    payload: dict[str, Any] = {
        "iss": settings.JWT_ISSUER,
        "sub": user_id,
        "type": token_type,
        "exp": now + ttl,
        "iat": now,
        **extra,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGO)


def make_access_token(user_id: str) -> str:
    return _encode(user_id, ACCESS, timedelta(minutes=settings.ACCESS_TTL_MIN))


def make_refresh_token(user_id: str, jti: str) -> str:
    return _encode(
        user_id, REFRESH, timedelta(days=settings.REFRESH_TTL_DAYS), jti=jti
    )


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(
        token, settings.JWT_SECRET, algorithms=[ALGO], issuer=settings.JWT_ISSUER
    )


def read_token(token: str, expected_type: str) -> dict[str, Any]:
    """Decode and check the token type; raises InvalidToken on any problem."""
    try:
        payload = decode_token(token)
    except JWTError as e:
        raise InvalidToken(str(e)) from e

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise InvalidToken(f"not a usable {expected_type} token")
    return payload
