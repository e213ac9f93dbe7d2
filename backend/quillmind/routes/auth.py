"""
QuillMind Backend — Auth Route Handlers
=========================================

What:  POST /api/auth/register and POST /api/auth/login.
How:   Thin handlers: body validation by Pydantic, everything else in
       AuthService.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.database import get_db_session
from quillmind.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from quillmind.schemas.common import ErrorResponse
from quillmind.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    responses={
        400: {"description": "Missing or blank field", "model": ErrorResponse},
        409: {"description": "Email or username already registered", "model": ErrorResponse},
    },
    summary="Create a user account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    user = await auth_service.register(
        db=db,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return RegisterResponse(user=user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing field", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange credentials for a session token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """
    Returns a bearer token to send as `Authorization: Bearer <token>` on
    every other /api route.
    """
    token, user = await auth_service.login(db=db, email=body.email, password=body.password)
    return LoginResponse(access_token=token, user=user)
