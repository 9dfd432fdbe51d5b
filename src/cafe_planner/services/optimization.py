from __future__ import annotations

import re

from cafe_planner.exceptions import MissingLocationError, ValidationError
from cafe_planner.schemas import CLOCK_PATTERN, Stop, TransportMode
from cafe_planner.services.geo import distance_km, travel_time_minutes
from cafe_planner.services.types import RouteSummary

DWELL_MINUTES = 60
MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(CLOCK_PATTERN)


def parse_clock(value: str) -> int:
    """Parse a ``HH:MM`` wall-clock string into minutes after midnight."""
    candidate = (value or "").strip()
    if len(candidate) == 4 and candidate[1] == ":":
        candidate = f"0{candidate}"
    if not _CLOCK_RE.match(candidate):
        raise ValidationError(f"Invalid start time {value!r}, expected HH:MM")
    hours, minutes = candidate.split(":")
    return int(hours) * 60 + int(minutes)


def format_clock(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(clock: str, minutes: int) -> str:
    # Only the clock face is kept; day rollover is not tracked.
    return format_clock(parse_clock(clock) + minutes)


def optimize_route(
    stops: list[Stop],
    start_time: str,
    mode: TransportMode | str = TransportMode.WALKING,
) -> list[Stop]:
    """Order stops by the nearest-neighbor heuristic and assign arrival time slots.

    The first stop is the fixed starting point. At every step the closest
    unvisited stop is chosen; ties go to the stop that came first in ``stops``.
    Returns new ``Stop`` values, ``stops`` itself is left untouched.
    """
    if not stops:
        return []

    missing = [stop.id for stop in stops if stop.coordinates is None]
    if missing:
        raise MissingLocationError(f"Stops without coordinates: {', '.join(missing)}")

    # The first stop's slot is the start time verbatim, so it must already be HH:MM.
    if not _CLOCK_RE.match(start_time or ""):
        raise ValidationError(f"Invalid start time {start_time!r}, expected HH:MM")

    remaining = list(stops)
    current = remaining.pop(0)
    ordered = [current]

    while remaining:
        nearest_index = 0
        nearest_distance = float("inf")
        for index, candidate in enumerate(remaining):
            distance = distance_km(current.coordinates, candidate.coordinates)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index

        current = remaining.pop(nearest_index)
        ordered.append(current)

    return assign_time_slots(ordered, start_time, mode)


def assign_time_slots(
    stops: list[Stop],
    start_time: str,
    mode: TransportMode | str = TransportMode.WALKING,
) -> list[Stop]:
    """Renumber ``stops`` in their given order and derive each arrival time slot.

    A pair of consecutive stops where either side has no coordinates adds the
    dwell time only.
    """
    clock = parse_clock(start_time)
    scheduled: list[Stop] = []

    for index, stop in enumerate(stops):
        if index > 0:
            previous = stops[index - 1]
            clock += DWELL_MINUTES
            if previous.coordinates is not None and stop.coordinates is not None:
                clock += travel_time_minutes(previous.coordinates, stop.coordinates, mode)

        scheduled.append(
            stop.model_copy(update={"order": index + 1, "time_slot": format_clock(clock)})
        )

    return scheduled


def renumber(stops: list[Stop]) -> list[Stop]:
    return [stop.model_copy(update={"order": index}) for index, stop in enumerate(stops, start=1)]


def summarize_route(
    stops: list[Stop], mode: TransportMode | str = TransportMode.WALKING
) -> RouteSummary:
    located = [stop for stop in stops if stop.coordinates is not None]

    total_distance = 0.0
    total_minutes = 0
    for previous, current in zip(located, located[1:]):
        total_distance += distance_km(previous.coordinates, current.coordinates)
        total_minutes += travel_time_minutes(previous.coordinates, current.coordinates, mode)

    return RouteSummary(
        stops=len(located),
        skipped_without_location=len(stops) - len(located),
        total_distance_km=total_distance,
        total_travel_minutes=total_minutes,
        coordinates=[(stop.coordinates.lng, stop.coordinates.lat) for stop in located],
    )
