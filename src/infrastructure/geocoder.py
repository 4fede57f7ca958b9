"""
OpenStreetMap Nominatim client.

Thin async wrapper over ``/search`` that turns the JSON array Nominatim
returns into ``GeocodeCandidate`` objects.  The ``httpx.AsyncClient`` is
owned by the caller (the app factory) so connection pooling and the
request timeout are configured in one place.

No retries: a failed call surfaces as ``GeocodingError`` immediately.
Spacing calls to respect the 1 request / second usage policy is the
caller's job.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.domain.entities import GeocodeCandidate

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Raised when the geocoding service cannot be reached or answers badly."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NominatimGeocoder:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: str = "DistanceCalculator/1.0",
        accept_language: str | None = "en",
    ):
        self.client = client
        self.search_url = base_url.rstrip("/") + "/search"
        self.headers = {"User-Agent": user_agent}
        if accept_language:
            self.headers["Accept-Language"] = accept_language

    async def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        address_details: bool = False,
    ) -> list[GeocodeCandidate]:
        """Return candidates for *query*, best match first (may be empty)."""
        params: dict[str, Any] = {"q": query, "format": "json"}
        if limit is not None:
            params["limit"] = limit
        if address_details:
            params["addressdetails"] = 1

        try:
            response = await self.client.get(
                self.search_url, params=params, headers=self.headers
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise GeocodingError(
                f"Geocoder returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoder request failed: {exc!r}") from exc
        except ValueError as exc:
            raise GeocodingError("Geocoder returned a non-JSON body") from exc

        if not isinstance(payload, list):
            raise GeocodingError("Geocoder returned an unexpected payload")

        candidates = [
            GeocodeCandidate(
                display_name=str(item.get("display_name", "")),
                lat=str(item["lat"]),
                lon=str(item["lon"]),
            )
            for item in payload
            if isinstance(item, dict) and "lat" in item and "lon" in item
        ]
        logger.debug("Geocoder returned %d candidate(s) for %r", len(candidates), query)
        return candidates
