"""
Library Store Backend - Password Hashing, JWT and the Bearer Dependency
========================================================================

What:  Hash/verify passwords (werkzeug), issue/decode access tokens
       (python-jose, HS* algorithms) and resolve the current user from the
       `Authorization: Bearer <token>` header.
Who:   AuthService (hashing, token issue) and every protected route
       (`Depends(get_current_user)`).

Token payload:
    {"sub": "<user uuid>", "email": "<email>", "exp": <unix ts>}

Every failure of the bearer dependency raises AuthenticationError, so the
global handler answers 401 with the same body shape as any other error.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from library_api.config import Settings, settings as default_settings
from library_api.database import get_db_session
from library_api.exceptions import AuthenticationError
from library_api.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(
    user: User,
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed JWT for `user` valid for `access_token_expire_minutes`."""
    settings = settings or default_settings
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(user.id), "email": user.email, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Decode and verify a token.

    Raises:
        AuthenticationError: expired, tampered or otherwise unreadable token
    """
    settings = settings or default_settings
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Unauthorized: Token expired")
    except JWTError as e:
        raise AuthenticationError(
            "Unauthorized: Invalid token",
            context={"reason": str(e)},
        )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    FastAPI dependency resolving the authenticated user.

    The session is the same one the route receives (FastAPI caches
    dependencies per request).
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Unauthorized: No or invalid token provided")

    settings: Settings = getattr(request.app.state, "settings", default_settings)
    payload = decode_access_token(credentials.credentials, settings)

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Unauthorized: Invalid token")
    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        raise AuthenticationError("Unauthorized: Invalid token")

    user = await db.get(User, user_id)
    if user is None:
        logger.info("Token subject %s no longer exists", user_id)
        raise AuthenticationError("Unauthorized: User not found")

    return user
