"""Authentication dependencies: password hashing and bearer JWTs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from werkzeug.security import check_password_hash, generate_password_hash

from reelreview.core.config import get_settings
from reelreview.services.models import Principal

logger = logging.getLogger(__name__)

security = HTTPBearer()


def hash_password(plaintext: str) -> str:
    return generate_password_hash(plaintext)


def verify_password(password_hash: str, plaintext: str) -> bool:
    return check_password_hash(password_hash, plaintext)


def create_access_token(email: str, *, now: datetime | None = None) -> str:
    """Sign a token whose subject is the caller's email."""
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": email,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """Verify the bearer token and return the caller's principal."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        logger.warning(f"JWT validation failed: Token expired. Detail: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except jwt.InvalidTokenError as exc:
        logger.warning(f"JWT validation failed: Invalid token. Reason: {exc}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    email = payload.get("sub")
    if not isinstance(email, str) or not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Principal(email=email)
