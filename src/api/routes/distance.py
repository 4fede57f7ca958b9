"""
Distance endpoints
==================

POST /api/v1/calculate    -- geocode two addresses and store the distance
GET  /api/v1/autocomplete -- address suggestions for a partial input
GET  /api/v1/history      -- past calculations, newest first
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    get_db,
    get_distance_service,
    get_optional_user_id,
    get_settings,
)
from src.api.middleware import current_rate_limit, limiter
from src.api.schemas import (
    CalculateRequest,
    CalculateResponse,
    CoordinatesOut,
    DistanceQueryResponse,
    ErrorResponse,
    LocationOut,
    SuggestionResponse,
)
from src.config import Settings
from src.domain.distance import km_to_miles
from src.domain.entities import (
    AddressNotFoundError,
    GeocodeCandidate,
    InvalidAddressError,
    InvalidCoordinatesError,
)
from src.infrastructure.geocoder import GeocodingError
from src.infrastructure.repositories import DistanceQueryRepository
from src.services.distance_service import DistanceCalculationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["distance"])

INVALID_ADDRESS_MESSAGE = (
    "Invalid address format. Addresses must be between 3 and 200 characters "
    "and contain only letters, numbers, spaces, commas, periods and hyphens."
)
INVALID_INPUT_MESSAGE = (
    "Invalid input format. Search text must be between 3 and 200 characters "
    "and contain only letters, numbers, spaces, commas, periods and hyphens."
)


def _location(address: str, hit: GeocodeCandidate, lat: float, lon: float) -> LocationOut:
    return LocationOut(
        address=address,
        display_name=hit.display_name,
        coordinates=CoordinatesOut(lat=lat, lon=lon),
    )


@router.post(
    "/calculate",
    response_model=CalculateResponse,
    summary="Calculate the distance between two addresses",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(current_rate_limit)
async def calculate(
    request: Request,
    body: CalculateRequest,
    service: DistanceCalculationService = Depends(get_distance_service),
    user_id: Optional[int] = Depends(get_optional_user_id),
):
    try:
        result = await service.calculate(
            body.source, body.destination, user_id=user_id
        )
    except InvalidAddressError:
        raise HTTPException(status_code=400, detail=INVALID_ADDRESS_MESSAGE)
    except AddressNotFoundError:
        raise HTTPException(status_code=400, detail="Address not found")
    except InvalidCoordinatesError:
        raise HTTPException(
            status_code=400,
            detail="Invalid coordinates received from geocoding service",
        )
    except (GeocodingError, SQLAlchemyError):
        logger.exception(
            "Calculate failed source=%r destination=%r",
            body.source,
            body.destination,
        )
        raise HTTPException(status_code=500, detail="Failed to calculate distance")

    record = result.record
    return CalculateResponse(
        id=record.id,
        distance=record.distance,
        metric=body.metric,
        distance_miles=(
            round(km_to_miles(record.distance), 2)
            if body.metric.includes_miles
            else None
        ),
        source=_location(
            record.source,
            result.source,
            result.source_coordinate.lat,
            result.source_coordinate.lon,
        ),
        destination=_location(
            record.destination,
            result.destination,
            result.destination_coordinate.lat,
            result.destination_coordinate.lon,
        ),
        created_at=record.created_at,
    )


@router.get(
    "/autocomplete",
    response_model=list[SuggestionResponse],
    summary="Suggest addresses matching a partial input",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(current_rate_limit)
async def autocomplete(
    request: Request,
    text: Optional[str] = Query(None, alias="input", description="Partial address text."),
    service: DistanceCalculationService = Depends(get_distance_service),
    settings: Settings = Depends(get_settings),
):
    try:
        suggestions = await service.suggest(text, limit=settings.autocomplete_limit)
    except InvalidAddressError:
        raise HTTPException(status_code=400, detail=INVALID_INPUT_MESSAGE)
    except GeocodingError:
        logger.exception("Autocomplete failed input=%r", text)
        raise HTTPException(
            status_code=500, detail="Failed to fetch address suggestions"
        )
    return suggestions


@router.get(
    "/history",
    response_model=list[DistanceQueryResponse],
    summary="List past calculations, newest first",
    description=(
        "Authenticated callers see only their own calculations; anonymous "
        "callers see only calculations made without a token. The "
        "`X-Total-Count` header carries the number of matching rows before "
        "`limit` is applied."
    ),
    responses={500: {"model": ErrorResponse}},
)
@limiter.limit(current_rate_limit)
async def history(
    request: Request,
    response: Response,
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    user_id: Optional[int] = Depends(get_optional_user_id),
    settings: Settings = Depends(get_settings),
):
    try:
        repo = DistanceQueryRepository(db)
        records = await repo.list_recent(
            user_id=user_id, limit=limit or settings.history_default_limit
        )
        total = await repo.count(user_id=user_id)
    except SQLAlchemyError:
        logger.exception("History fetch failed user_id=%s", user_id)
        raise HTTPException(status_code=500, detail="Failed to fetch history")
    logger.debug(
        "Fetched %d of %d history record(s) user_id=%s", len(records), total, user_id
    )
    response.headers["X-Total-Count"] = str(total)
    return records
