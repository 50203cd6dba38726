"""Coordinate bounds validation."""

import math
from typing import Optional

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


def _to_float(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def is_valid_coordinate(latitude, longitude) -> bool:
    """Check that a latitude/longitude pair lies within Earth bounds.

    Args:
        latitude: Number or numeric string.
        longitude: Number or numeric string.

    Returns:
        True when both values are finite numbers inside the inclusive
        bounds, False otherwise (including non-numeric input).
    """
    lat = _to_float(latitude)
    lon = _to_float(longitude)
    if lat is None or lon is None:
        return False
    return MIN_LATITUDE <= lat <= MAX_LATITUDE and MIN_LONGITUDE <= lon <= MAX_LONGITUDE
