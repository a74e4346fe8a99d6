"""
Library Store Backend - Auth Route Handlers
============================================

What:  Registration, login and the current-user endpoint.
Who:   The web client's sign-up/sign-in pages; any client holding a token.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.database import get_db_session
from library_api.models.user import User
from library_api.schemas.auth import (
    AccessToken,
    LoginRequest,
    RegisteredUser,
    RegisterRequest,
    UserSummary,
)
from library_api.schemas.common import DataResponse, ErrorResponse
from library_api.security import get_current_user
from library_api.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=DataResponse[RegisteredUser],
    responses={
        400: {"description": "Invalid email or weak password", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create a user account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[RegisteredUser]:
    user = await auth_service.register(db, payload)
    return DataResponse(message="User registered successfully", data=user)


@router.post(
    "/login",
    response_model=DataResponse[AccessToken],
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange email and password for a bearer token",
)
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> DataResponse[AccessToken]:
    token = await auth_service.login(db, payload, request.app.state.settings)
    return DataResponse(message="Login successfully", data=token)


@router.get(
    "/me",
    response_model=DataResponse[UserSummary],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user profile",
)
async def me(current_user: User = Depends(get_current_user)) -> DataResponse[UserSummary]:
    return DataResponse(
        message="Get me successfully",
        data=UserSummary.model_validate(current_user),
    )
