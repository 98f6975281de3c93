"""Great-circle distance helpers."""

import math

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two coordinates.

    Args:
        lat1: Latitude of the first point (decimal degrees)
        lon1: Longitude of the first point (decimal degrees)
        lat2: Latitude of the second point (decimal degrees)
        lon2: Longitude of the second point (decimal degrees)

    Returns:
        Distance in kilometers (0.0 for identical points)
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    # Rounding can push a a hair past 1.0 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
