"""
Library Store Backend - Auth Service
=====================================

What:  User registration and credential login.
Who:   Called by the /api/auth route handlers.

Password policy:
    At least 8 characters, with an uppercase letter, a lowercase letter,
    a digit and one of the symbols in PASSWORD_SYMBOLS.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.config import Settings
from library_api.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    ValidationError,
)
from library_api.models.user import User
from library_api.schemas.auth import AccessToken, LoginRequest, RegisteredUser, RegisterRequest
from library_api.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "!@#$%^&*()_+~`|}{[]:;?><,./-="


def password_problems(password: str) -> List[str]:
    """Every unmet password rule, empty when the password is acceptable."""
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain an uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must contain a lowercase letter")
    if not re.search(r"\d", password):
        problems.append("Password must contain a digit")
    if not any(ch in PASSWORD_SYMBOLS for ch in password):
        problems.append("Password must contain a symbol")
    return problems


class AuthService:
    async def register(self, db: AsyncSession, payload: RegisterRequest) -> RegisteredUser:
        """
        Create a user account.

        Raises:
            ValidationError: weak password
            ConflictError:   email already registered
        """
        problems = password_problems(payload.password)
        if problems:
            raise ValidationError(
                "Password does not meet the strength requirements",
                errors=problems,
                field="password",
            )

        email = payload.email.lower()
        duplicate = ConflictError(f'Registration failed: Email "{email}" already exists.')

        try:
            existing = await db.scalar(select(User.id).where(User.email == email))
            if existing is not None:
                raise duplicate

            user = User(
                email=email,
                password=hash_password(payload.password),
                username=payload.username,
            )
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration.
            await db.rollback()
            raise duplicate
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", email, e, exc_info=True)
            raise DatabaseError(message="Could not register the user. Please try again.")

        logger.info("User registered: %s", user.id)
        return RegisteredUser.model_validate(user)

    async def login(
        self,
        db: AsyncSession,
        payload: LoginRequest,
        settings: Optional[Settings] = None,
    ) -> AccessToken:
        """
        Exchange credentials for an access token.

        Raises:
            AuthenticationError: unknown email or wrong password (same message for both)
        """
        try:
            user = await db.scalar(select(User).where(User.email == payload.email.lower()))
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", e, exc_info=True)
            raise DatabaseError(message="Could not log in. Please try again.")

        if user is None or not verify_password(payload.password, user.password):
            raise AuthenticationError("Invalid credentials")

        return AccessToken(access_token=create_access_token(user, settings))


auth_service = AuthService()
