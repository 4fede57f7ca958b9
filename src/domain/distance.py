"""
Distance calculation using the Haversine formula.

Assumption
----------
Distances are great-circle distances on a spherical Earth of radius
6 371 km, not road distances.  For two geocoded addresses this is the
"as the crow flies" figure; the error against an ellipsoidal model stays
well under 0.5 %.

No validation happens here.  Callers are expected to run
``validate_coordinates`` first; NaN in gives NaN out.

Complexity: O(1) per call.
"""

import math

EARTH_RADIUS_KM = 6_371.0
MILES_PER_KM = 0.621371


def calculate_distance(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r = lat1 * math.pi / 180
    lat2_r = lat2 * math.pi / 180
    dlat = (lat2 - lat1) * math.pi / 180
    dlon = (lon2 - lon1) * math.pi / 180

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    )
    # Rounding can push antipodal pairs just past 1; NaN falls through both tests
    if a > 1.0:
        a = 1.0
    elif a < 0.0:
        a = 0.0
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def km_to_miles(km: float) -> float:
    return km * MILES_PER_KM
