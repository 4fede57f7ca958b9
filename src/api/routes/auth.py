"""
Authentication endpoints
========================

POST /api/v1/auth/register -- create an account
POST /api/v1/auth/login    -- exchange email + password for a bearer token
GET  /api/v1/auth/user     -- the account behind the current token
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user_id, get_db, get_settings
from src.api.middleware import current_rate_limit, limiter
from src.api.schemas import (
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from src.config import Settings
from src.infrastructure.repositories import UserRepository
from src.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    summary="Register a new account",
    responses={409: {"model": ErrorResponse}},
)
@limiter.limit(current_rate_limit)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        user = await auth_service.register(
            db, username=body.username, email=body.email, password=body.password
        )
    except auth_service.UserExistsError as exc:
        logger.warning("Registration rejected for email=%r: %s", body.email, exc)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    logger.info("Registered user id=%s username=%r", user.id, user.username)
    return user


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in and receive a bearer token",
    responses={401: {"model": ErrorResponse}},
)
@limiter.limit(current_rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        user, token, expires_at = await auth_service.login(
            db, email=body.email, password=body.password, settings=settings
        )
    except auth_service.AuthenticationError as exc:
        logger.warning("Failed login for email=%r", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(token=token, user_id=user.id, expires_at=expires_at)


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Get the authenticated user",
    responses={401: {"model": ErrorResponse}},
)
async def current_user(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        # Token outlived the account
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
