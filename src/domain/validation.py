"""
Input validation run before (addresses) and after (coordinates) geocoding.

Both checks are whitelists: anything that does not match is rejected
outright, nothing is escaped or rewritten.
"""

from __future__ import annotations

import math
import re
from numbers import Real

ADDRESS_MIN_LENGTH = 3
ADDRESS_MAX_LENGTH = 200

# letters and digits (any script), whitespace, comma, period, hyphen
_ADDRESS_RE = re.compile(r"(?:[^\W_]|[\s,.\-])+")


def validate_address(address: object) -> bool:
    """Return True if *address* is a plausible free-text address."""
    if not isinstance(address, str):
        return False
    if not ADDRESS_MIN_LENGTH <= len(address) <= ADDRESS_MAX_LENGTH:
        return False
    return _ADDRESS_RE.fullmatch(address) is not None


def validate_coordinates(lat: object, lon: object) -> bool:
    """Return True if (*lat*, *lon*) is a numeric pair inside WGS84 bounds."""
    for value in (lat, lon):
        # bool is an int subclass; True is not a latitude
        if isinstance(value, bool) or not isinstance(value, Real):
            return False
        if math.isnan(value):
            return False

    return -90 <= lat <= 90 and -180 <= lon <= 180
