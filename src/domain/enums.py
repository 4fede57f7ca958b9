"""Domain enumerations."""

import enum


class DistanceUnit(str, enum.Enum):
    KM = "km"
    MILES = "miles"
    BOTH = "both"

    @property
    def includes_miles(self) -> bool:
        return self in (DistanceUnit.MILES, DistanceUnit.BOTH)
