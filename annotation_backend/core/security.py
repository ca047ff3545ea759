# /annotation_backend/core/security.py

"""
Credential hashing and access-token issuance.

Passwords are hashed with bcrypt. Access tokens are HMAC-signed JWTs whose
`sub` claim is the user id and whose `exp` claim is derived from
ACCESS_TOKEN_EXPIRE_MINUTES.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
from jose import JWTError, jwt

from .config import settings

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def create_access_token(subject: Any, expires_minutes: Optional[int] = None) -> str:
    """Creates a signed JWT for `subject` (a user id)."""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    claims = {"sub": str(subject), "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Returns the `sub` claim of a valid token, or None when the token is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("Rejected access token: %s", e)
        return None
    return payload.get("sub")
