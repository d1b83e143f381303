import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.platform.config import settings
from app.platform.exceptions import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(password: str) -> str:
    # SHA-256 first so passwords longer than bcrypt's 72 byte limit still count in full
    password_hash = hashlib.sha256(password.encode("utf-8")).digest()
    hashed = bcrypt.hashpw(password_hash, bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time check of a password against its bcrypt hash."""
    password_hash = hashlib.sha256(plain_password.encode("utf-8")).digest()
    try:
        return bcrypt.checkpw(password_hash, hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _encode(claims: dict, secret: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = claims.copy()
    to_encode.update({"type": token_type, "iat": now, "exp": now + lifetime})
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def issue_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a short-lived access token.

    ``claims`` carries ``sub`` (admin id), ``username`` and ``role`` only.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(claims, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE, lifetime)


def issue_refresh_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a long-lived refresh token with the refresh secret.

    A random ``jti`` makes every issued token unique, so a rotation always
    produces a value different from the one it replaces.
    """
    lifetime = expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode = {**claims, "jti": secrets.token_urlsafe(16)}
    return _encode(to_encode, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE, lifetime)


def verify_token(token: str, secret: str, expected_type: Optional[str] = None) -> dict:
    """
    Decode and verify a token signed with ``secret``.

    Raises:
        TokenExpiredError: the signature is valid but ``exp`` has passed
        InvalidSignatureError: signed with another secret, or of the wrong type
        MalformedTokenError: not a decodable JWT
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except jwt.InvalidSignatureError as e:
        raise InvalidSignatureError("Invalid token") from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError("Invalid token") from e

    if expected_type and payload.get("type") != expected_type:
        raise InvalidSignatureError("Invalid token")
    return payload


def verify_access_token(token: str) -> dict:
    return verify_token(token, settings.JWT_ACCESS_SECRET, ACCESS_TOKEN_TYPE)


def verify_refresh_token(token: str) -> dict:
    return verify_token(token, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE)


def token_claims(admin) -> dict:
    return {"sub": str(admin.id), "username": admin.username, "role": admin.role}
