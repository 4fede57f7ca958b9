"""
Distance calculation workflow.

Linear pipeline, one call per request::

    validate addresses -> geocode source -> pause -> geocode destination
    -> validate coordinates -> haversine -> persist

Every collaborator (geocoder, repository, logger, pause length) is handed
in by the caller, so the service holds no module-level state and tests
can drive it with fakes.

Errors
------
* ``InvalidAddressError``      -- rejected before any geocoder call
* ``AddressNotFoundError``     -- geocoder returned no candidates
* ``InvalidCoordinatesError``  -- geocoder returned unusable coordinates
* ``GeocodingError`` / ``SQLAlchemyError`` propagate untouched; nothing
  is retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from src.domain.distance import calculate_distance
from src.domain.entities import (
    AddressNotFoundError,
    CalculationResult,
    Coordinate,
    GeocodeCandidate,
    InvalidAddressError,
    InvalidCoordinatesError,
    Suggestion,
)
from src.domain.validation import validate_address, validate_coordinates
from src.infrastructure.repositories import DistanceQueryRepository


class Geocoder(Protocol):
    async def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        address_details: bool = False,
    ) -> list[GeocodeCandidate]: ...


class DistanceCalculationService:
    def __init__(
        self,
        geocoder: Geocoder,
        repository: DistanceQueryRepository,
        *,
        request_delay_seconds: float = 1.0,
        logger: logging.Logger | None = None,
    ):
        self.geocoder = geocoder
        self.repository = repository
        self.request_delay_seconds = request_delay_seconds
        self.logger = logger or logging.getLogger(__name__)

    async def calculate(
        self, source: object, destination: object, *, user_id: int | None = None
    ) -> CalculationResult:
        if not validate_address(source) or not validate_address(destination):
            self.logger.warning(
                "Invalid address format source=%r destination=%r", source, destination
            )
            raise InvalidAddressError("Invalid address format")

        self.logger.debug("Geocoding source=%r destination=%r", source, destination)
        source_hit = await self._first_candidate(source)
        # Nominatim allows one request per second per client
        if self.request_delay_seconds > 0:
            await asyncio.sleep(self.request_delay_seconds)
        destination_hit = await self._first_candidate(destination)

        try:
            source_coord = self._checked_coordinate(source_hit)
            destination_coord = self._checked_coordinate(destination_hit)
        except InvalidCoordinatesError:
            self.logger.error(
                "Invalid coordinates received source=%r destination=%r",
                source_hit,
                destination_hit,
            )
            raise

        distance = calculate_distance(
            source_coord.lat,
            source_coord.lon,
            destination_coord.lat,
            destination_coord.lon,
        )

        record = await self.repository.create(
            source=source,
            destination=destination,
            distance=distance,
            source_lat=source_coord.lat,
            source_lon=source_coord.lon,
            destination_lat=destination_coord.lat,
            destination_lon=destination_coord.lon,
            user_id=user_id,
        )
        self.logger.info(
            "Distance calculated source=%r destination=%r distance_km=%.3f user_id=%s",
            source,
            destination,
            distance,
            user_id,
        )
        return CalculationResult(
            record=record,
            source=source_hit,
            destination=destination_hit,
            source_coordinate=source_coord,
            destination_coordinate=destination_coord,
        )

    async def suggest(self, text: object, *, limit: int = 5) -> list[Suggestion]:
        """Autocomplete: up to *limit* candidates with usable coordinates."""
        if not validate_address(text):
            self.logger.warning("Invalid autocomplete input=%r", text)
            raise InvalidAddressError("Invalid input format")

        candidates = await self.geocoder.search(
            text, limit=limit, address_details=True
        )
        suggestions: list[Suggestion] = []
        for candidate in candidates:
            try:
                coord = self._checked_coordinate(candidate)
            except InvalidCoordinatesError:
                self.logger.warning(
                    "Skipping suggestion with bad coordinates: %r", candidate
                )
                continue
            suggestions.append(
                Suggestion(
                    display_name=candidate.display_name,
                    lat=coord.lat,
                    lon=coord.lon,
                )
            )
        self.logger.info(
            "Fetched %d suggestion(s) for input=%r", len(suggestions), text
        )
        return suggestions

    # ── Internals ─────────────────────────────────────────────────────

    async def _first_candidate(self, address: str) -> GeocodeCandidate:
        candidates = await self.geocoder.search(address)
        if not candidates:
            self.logger.warning("Address not found: %r", address)
            raise AddressNotFoundError(address)
        return candidates[0]

    def _checked_coordinate(self, candidate: GeocodeCandidate) -> Coordinate:
        try:
            coord = candidate.to_coordinate()
        except ValueError:
            coord = None
        if coord is None or not validate_coordinates(coord.lat, coord.lon):
            raise InvalidCoordinatesError(
                f"Invalid coordinates lat={candidate.lat!r} lon={candidate.lon!r}"
            )
        return coord
