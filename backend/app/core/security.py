from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt

from app.core.config import settings


def create_access_token(
    subject: UUID | str, expires_delta: timedelta | None = None
) -> str:
    """
    Issue a signed access token for an account.

    Tokens are normally minted by the signup/session service; this helper
    exists for tooling and tests.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: dict[str, Any] = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired or badly signed.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
