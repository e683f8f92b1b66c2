"""
ScanPlant Backend — Great-Circle Distance
===========================================

What:  Haversine distance between two WGS-84 coordinates, in kilometres.
How:   Closed-form formula on a sphere of radius 6371 km. Works on
       coordinate differences, so no antimeridian special case is needed.
       Coordinates are not range-checked; that is the caller's job.
"""

import math

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between (lat1, lon1) and (lat2, lon2).

    Returns 0.0 for coincident points and ≈ π·R for antipodal ones.
    Symmetric in its two points.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push `a` a hair above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
