from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DEFAULT_START_TIME = "09:00"
NOTES_MAX_LENGTH = 200


class TransportMode(str, Enum):
    WALKING = "walking"
    CYCLING = "cycling"
    DRIVING = "driving"
    PUBLIC_TRANSIT = "public-transit"

    @classmethod
    def coerce(cls, value: Any) -> TransportMode:
        """Map legacy and unknown values onto the enumeration, defaulting to walking."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace("_", "-")
        if normalized in {"public", "transit"}:
            return cls.PUBLIC_TRANSIT
        try:
            return cls(normalized)
        except ValueError:
            return cls.WALKING


class _Record(BaseModel):
    # Persisted records keep the camelCase keys of the stored JSON.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Coordinate(_Record):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)


class Stop(_Record):
    id: str = Field(min_length=1)
    name: str = ""
    address: str = ""
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    price_range: str = ""
    cuisine: str = ""
    photos: list[str] = Field(default_factory=list)
    description: str = ""
    coordinates: Coordinate | None = None
    notes: str = Field(default="", max_length=NOTES_MAX_LENGTH)
    order: int = Field(default=0, ge=0)
    time_slot: str = Field(default="", pattern=rf"^$|{CLOCK_PATTERN}")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator(
        "name", "address", "price_range", "cuisine", "description", "notes", "time_slot",
        mode="before",
    )
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def has_location(self) -> bool:
        return self.coordinates is not None


class Plan(_Record):
    cafes: list[Stop] = Field(default_factory=list)
    start_time: str = Field(default=DEFAULT_START_TIME, pattern=CLOCK_PATTERN)
    transport_mode: TransportMode = TransportMode.WALKING

    @field_validator("transport_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, value: Any) -> TransportMode:
        return TransportMode.coerce(value)

    @model_validator(mode="after")
    def _unique_stop_ids(self) -> Plan:
        seen: set[str] = set()
        for stop in self.cafes:
            if stop.id in seen:
                raise ValueError(f"Cafe {stop.id} appears more than once in the plan")
            seen.add(stop.id)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.cafes

    def find(self, stop_id: str) -> Stop | None:
        return next((stop for stop in self.cafes if stop.id == stop_id), None)


class ArchivedPlan(Plan):
    id: str = Field(min_length=1)
    date: datetime
    completed: bool = False

    def as_plan(self) -> Plan:
        return Plan(
            cafes=[stop.model_copy(deep=True) for stop in self.cafes],
            start_time=self.start_time,
            transport_mode=self.transport_mode,
        )


class UserData(_Record):
    favorite_cafes: list[str] = Field(default_factory=list)
    visited_cafes: list[str] = Field(default_factory=list)


class AddStopRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cafe_id: str = Field(min_length=1, max_length=100)


class ReorderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    from_index: int = Field(ge=0)
    to_index: int = Field(ge=0)


class NotesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    notes: str = Field(max_length=2000)


class StartTimeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_time: str = Field(min_length=4, max_length=5)


class TransportModeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    transport_mode: str = Field(min_length=1, max_length=32)


class NearbyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    lat: float | None = Field(default=None, ge=-90.0, le=90.0, allow_inf_nan=False)
    lng: float | None = Field(default=None, ge=-180.0, le=180.0, allow_inf_nan=False)
    radius_km: float | None = Field(default=None, gt=0.0, le=50.0)
    limit: int | None = Field(default=None, ge=1, le=100)


class NearbyCafeResponse(BaseModel):
    cafe: dict[str, Any]
    distance_km: float


class RouteSummaryResponse(BaseModel):
    stops: int
    skipped_without_location: int
    total_distance_km: float
    total_travel_minutes: int
    route_geojson: dict[str, Any]
