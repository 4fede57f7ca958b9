"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field, StringConstraints

from src.domain.enums import DistanceUnit


# ── Requests ──────────────────────────────────────────────────────────


class CalculateRequest(BaseModel):
    # Optional so a missing address gets the same 400 as a malformed one
    source: Optional[str] = Field(None, description="Free-text start address.")
    destination: Optional[str] = Field(None, description="Free-text end address.")
    metric: DistanceUnit = Field(
        DistanceUnit.KM,
        description="Units echoed in the response. Storage is always km.",
    )


class RegisterRequest(BaseModel):
    # Whitespace is stripped before the length and pattern checks run
    username: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)
    ]
    email: Annotated[
        str,
        StringConstraints(
            strip_whitespace=True,
            max_length=255,
            pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        ),
    ]
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: str
    password: str


# ── Responses ─────────────────────────────────────────────────────────


class CoordinatesOut(BaseModel):
    lat: float
    lon: float


class LocationOut(BaseModel):
    address: str
    display_name: str
    coordinates: CoordinatesOut


class CalculateResponse(BaseModel):
    id: int
    distance: float = Field(..., description="Great-circle distance in km.")
    metric: DistanceUnit
    distance_miles: Optional[float] = None
    source: LocationOut
    destination: LocationOut
    created_at: datetime


class SuggestionResponse(BaseModel):
    display_name: str
    lat: float
    lon: float

    model_config = {"from_attributes": True}


class DistanceQueryResponse(BaseModel):
    id: int
    source: str
    destination: str
    distance: float
    source_lat: Optional[float] = None
    source_lon: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lon: Optional[float] = None
    user_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user_id: int
    expires_at: datetime


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
