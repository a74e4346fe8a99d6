"""
Library Store Backend - Auth Schemas
=====================================

Request bodies for register/login and the public user shapes. The password
hash never appears in any response model.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from library_api.schemas.common import CamelModel


class RegisterRequest(BaseModel):
    email: EmailStr
    # Strength rules are enforced by AuthService so the message stays readable.
    password: str = Field(min_length=1, max_length=128)
    username: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UserSummary(CamelModel):
    """Safe user fields: returned by /auth/me and nested in transactions."""

    id: uuid.UUID
    email: str
    username: Optional[str] = None


class RegisteredUser(UserSummary):
    created_at: datetime


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
