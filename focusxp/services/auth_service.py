import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from focusxp.config import settings


def issue_access_token(user_id: str | uuid.UUID) -> dict:
    """Issue a signed JWT access token for the given user."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return {
        "access_token": jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


def decode_access_token(token: str) -> str:
    """Verify an access token and return the user id it was issued for."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("type") != "access" or "sub" not in payload:
        raise ValueError("Invalid token type")

    return payload["sub"]
