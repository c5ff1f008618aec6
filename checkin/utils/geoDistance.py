import math

from checkin.schemas.event import Coordinate

EARTH_RADIUS_M = 6_371_000


# ----------------------------------------Geolocation Logic/Algorithm--------------------------------------------
def haversine(lat1, lon1, lat2, lon2):
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    # rounding can push a a hair outside [0, 1] near antipodes
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two coordinates."""
    if a == b:
        return 0.0
    return haversine(a.latitude, a.longitude, b.latitude, b.longitude)


def is_within_radius(position: Coordinate, center: Coordinate, radius_meters: float) -> bool:
    return distance(position, center) <= radius_meters
