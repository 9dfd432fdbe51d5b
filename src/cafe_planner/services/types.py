from __future__ import annotations

from dataclasses import dataclass

from cafe_planner.schemas import Coordinate, Stop


@dataclass(slots=True, frozen=True)
class UserPosition:
    point: Coordinate
    is_default: bool


@dataclass(slots=True, frozen=True)
class NearbyCafe:
    cafe: Stop
    distance_km: float


@dataclass(slots=True, frozen=True)
class RouteSummary:
    stops: int
    skipped_without_location: int
    total_distance_km: float
    total_travel_minutes: int
    coordinates: list[tuple[float, float]]
