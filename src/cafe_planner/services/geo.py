from __future__ import annotations

import math

from cafe_planner.schemas import Coordinate, TransportMode

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32

SPEED_KMH: dict[TransportMode, float] = {
    TransportMode.WALKING: 5.0,
    TransportMode.CYCLING: 15.0,
    TransportMode.DRIVING: 40.0,
    TransportMode.PUBLIC_TRANSIT: 30.0,
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad = math.radians(lat1)
    lon1_rad = math.radians(lon1)
    lat2_rad = math.radians(lat2)
    lon2_rad = math.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2.0) ** 2
    )
    # Rounding can push `a` just outside [0, 1] near the poles and antipodes.
    a = min(1.0, max(0.0, a))
    c = 2 * math.asin(math.sqrt(a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def speed_kmh(mode: TransportMode | str) -> float:
    return SPEED_KMH[TransportMode.coerce(mode)]


def travel_time_minutes(
    a: Coordinate, b: Coordinate, mode: TransportMode | str = TransportMode.WALKING
) -> int:
    minutes = distance_km(a, b) / speed_kmh(mode) * 60.0
    return int(math.floor(minutes + 0.5))


def degrees_for_km(radius_km: float, ref_lat: float) -> tuple[float, float]:
    """Return the (lat, lng) degree spans covering ``radius_km`` around ``ref_lat``."""
    lat_span = radius_km / KM_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(ref_lat))
    if cos_lat < 1e-6:
        return lat_span, 180.0
    return lat_span, min(180.0, radius_km / (KM_PER_DEGREE_LAT * cos_lat))
