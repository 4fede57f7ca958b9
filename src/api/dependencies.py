"""
FastAPI dependency injection helpers.

The engine/session factory, geocoder and settings are built once by
``create_app`` and kept on ``app.state``; handlers only ever see them
through these functions, which tests replace via
``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings
from src.infrastructure.geocoder import NominatimGeocoder
from src.infrastructure.repositories import DistanceQueryRepository
from src.services import auth_service
from src.services.distance_service import DistanceCalculationService

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session; commit on success, rollback on error."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_geocoder(request: Request) -> NominatimGeocoder:
    return request.app.state.geocoder


def get_distance_service(
    db: AsyncSession = Depends(get_db),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
    settings: Settings = Depends(get_settings),
) -> DistanceCalculationService:
    return DistanceCalculationService(
        geocoder,
        DistanceQueryRepository(db),
        request_delay_seconds=settings.geocoder_request_delay_seconds,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[int]:
    """``None`` for anonymous callers; a bad token is still a 401."""
    if credentials is None:
        return None
    try:
        return auth_service.decode_access_token(credentials.credentials, settings)
    except auth_service.AuthenticationError as exc:
        raise _unauthorized(str(exc))


def get_current_user_id(
    user_id: Optional[int] = Depends(get_optional_user_id),
) -> int:
    if user_id is None:
        raise _unauthorized("Not authenticated")
    return user_id
