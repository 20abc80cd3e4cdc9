"""Distance and direction between resort coordinates."""

import math

from bot.services.errors import InvalidCoordinateError
from models import DistanceAndBearing

# Mean Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0088
KM_TO_MILES = 0.621371
FEET_PER_MILE = 5280

COMPASS_POINTS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
COMPASS_ARROWS = ["⬆️", "↗️", "➡️", "↘️", "⬇️", "↙️", "⬅️", "↖️"]

# Keeps the Mercator projection finite at the poles
_MAX_PROJECTED_LAT = math.pi / 2 - 1e-12


def _validate(lat: float, lon: float) -> None:
    if lat is None or math.isnan(lat) or not -90 <= lat <= 90:
        raise InvalidCoordinateError("latitude", lat)
    if lon is None or math.isnan(lon) or not -180 <= lon <= 180:
        raise InvalidCoordinateError("longitude", lon)


def haversine_km(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> float:
    """Great-circle distance in kilometers."""
    lat1 = math.radians(from_lat)
    lat2 = math.radians(to_lat)
    dlat = lat2 - lat1
    dlon = math.radians(to_lon - from_lon)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def compass_bearing(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> float:
    """Constant compass heading (rhumb line) from one point to another, in [0, 360).

    The reverse heading is always this one plus 180 degrees. Identical points
    give 0. Over long east-west distances this differs visibly from the
    great-circle initial bearing: Whistler to Zermatt is about 93 degrees
    (east) here, where the great-circle route starts out near 33 (north-east).
    """
    lat1 = max(-_MAX_PROJECTED_LAT, min(_MAX_PROJECTED_LAT, math.radians(from_lat)))
    lat2 = max(-_MAX_PROJECTED_LAT, min(_MAX_PROJECTED_LAT, math.radians(to_lat)))
    dlon = math.radians(to_lon - from_lon)

    # Take the shorter way around the antimeridian
    if abs(dlon) > math.pi:
        dlon = -(2 * math.pi - dlon) if dlon > 0 else 2 * math.pi + dlon

    dpsi = math.log(math.tan(math.pi / 4 + lat2 / 2) / math.tan(math.pi / 4 + lat1 / 2))
    bearing = math.degrees(math.atan2(dlon, dpsi))
    return (bearing + 360) % 360


def distance_and_bearing(
    from_lat: float, from_lon: float, to_lat: float, to_lon: float
) -> DistanceAndBearing:
    """Distance and heading from the first coordinate toward the second.

    Raises InvalidCoordinateError for out-of-range input.
    """
    _validate(from_lat, from_lon)
    _validate(to_lat, to_lon)

    distance_km = haversine_km(from_lat, from_lon, to_lat, to_lon)
    return DistanceAndBearing(
        distance_km=distance_km,
        distance_miles=distance_km * KM_TO_MILES,
        bearing_degrees=compass_bearing(from_lat, from_lon, to_lat, to_lon),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(distance_km: float, use_metric: bool) -> str:
    """Format a distance given in kilometers.

    Below one major unit the minor unit is used (m or ft, whole numbers),
    otherwise km or mi with one decimal.
    """
    if use_metric:
        if distance_km < 1:
            return f"{_round_half_up(distance_km * 1000)} m"
        return f"{distance_km:.1f} km"

    miles = distance_km * KM_TO_MILES
    if miles < 1:
        return f"{_round_half_up(miles * FEET_PER_MILE)} ft"
    return f"{miles:.1f} mi"


def _compass_index(bearing: float) -> int:
    return _round_half_up((bearing % 360) / 45) % 8


def bearing_to_compass(bearing: float) -> str:
    """8-point compass label (N, NE, ...) for a bearing in degrees."""
    return COMPASS_POINTS[_compass_index(bearing)]


def bearing_to_arrow(bearing: float) -> str:
    """Arrow emoji pointing along a bearing."""
    return COMPASS_ARROWS[_compass_index(bearing)]
