"""
Pure-Python domain entities (no ORM dependency).

The calculation service works with these; the persistence layer maps
results onto SQLAlchemy models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class CalculationError(Exception):
    """Base class for errors the caller can fix by changing its input."""


class InvalidAddressError(CalculationError):
    pass


class AddressNotFoundError(CalculationError):
    def __init__(self, address: str):
        super().__init__(f"Address not found: {address!r}")
        self.address = address


class InvalidCoordinatesError(CalculationError):
    pass


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float


@dataclass(frozen=True)
class GeocodeCandidate:
    """One geocoder hit, coordinates kept as the raw strings received."""

    display_name: str
    lat: str
    lon: str

    def to_coordinate(self) -> Coordinate:
        """Parse the raw strings.  Raises ``ValueError`` if they are not numbers."""
        return Coordinate(lat=float(self.lat), lon=float(self.lon))


@dataclass(frozen=True)
class Suggestion:
    display_name: str
    lat: float
    lon: float


@dataclass
class CalculationResult:
    record: Any  # DistanceQueryModel
    source: GeocodeCandidate
    destination: GeocodeCandidate
    source_coordinate: Coordinate
    destination_coordinate: Coordinate

    @property
    def distance_km(self) -> float:
        return self.record.distance
