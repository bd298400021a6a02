"""Security utilities (passwords, bearer tokens)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

JWT_ALGORITHM = "HS256"

password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str) -> str:
    return password_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return password_context.verify(plain, hashed)


def create_access_token(subject: str, secret: str, ttl: timedelta) -> tuple[str, datetime]:
    """Sign an HS256 token for ``subject``. Returns (token, expiry)."""
    now = datetime.now(timezone.utc)
    expiry = now + ttl
    token = jwt.encode(
        {"sub": subject, "iat": now, "nbf": now, "exp": expiry},
        secret,
        algorithm=JWT_ALGORITHM,
    )
    return token, expiry


def decode_access_token(token: str, secret: str) -> dict:
    """
    Verify signature and expiry and return the claims.
    Raises jwt.InvalidTokenError for bad tokens; other jwt.PyJWTError
    subclasses (e.g. InvalidKeyError) signal a verification problem on our side.
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["exp", "sub"]},
    )
