from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import pydantic

from cafe_planner.exceptions import NotFoundError
from cafe_planner.models import Cafe
from cafe_planner.schemas import Coordinate, Stop
from cafe_planner.services.geo import degrees_for_km, distance_km
from cafe_planner.services.types import NearbyCafe

logger = logging.getLogger(__name__)


class CafeCatalog(ABC):
    """Read-only lookup of cafes as ``Stop`` records."""

    @abstractmethod
    def all(self) -> list[Stop]:
        """Every cafe in the catalog."""

    def get(self, cafe_id: str) -> Stop:
        for cafe in self.all():
            if cafe.id == cafe_id:
                return cafe
        raise NotFoundError(f"Cafe {cafe_id} does not exist")

    def nearby(self, point: Coordinate, radius_km: float, limit: int = 10) -> list[NearbyCafe]:
        return self._rank(self._candidates(point, radius_km), point, radius_km, limit)

    def near_cafe(self, cafe_id: str, radius_km: float, limit: int = 10) -> list[NearbyCafe]:
        origin = self.get(cafe_id)
        if origin.coordinates is None:
            return []
        # One extra slot, the origin cafe always ranks first at distance zero.
        ranked = self.nearby(origin.coordinates, radius_km, limit + 1)
        return [item for item in ranked if item.cafe.id != cafe_id][:limit]

    def search(
        self,
        query: str = "",
        *,
        cuisine: str = "",
        price_range: str = "",
    ) -> list[Stop]:
        needle = query.strip().lower()
        results = []
        for cafe in self.all():
            if needle and not any(
                needle in field.lower() for field in (cafe.name, cafe.cuisine, cafe.address)
            ):
                continue
            if cuisine and cafe.cuisine != cuisine:
                continue
            if price_range and cafe.price_range != price_range:
                continue
            results.append(cafe)
        return results

    def _candidates(self, point: Coordinate, radius_km: float) -> list[Stop]:
        return self.all()

    @staticmethod
    def _rank(
        candidates: list[Stop], point: Coordinate, radius_km: float, limit: int
    ) -> list[NearbyCafe]:
        ranked = []
        for cafe in candidates:
            if cafe.coordinates is None:
                continue
            distance = distance_km(point, cafe.coordinates)
            if distance <= radius_km:
                ranked.append(NearbyCafe(cafe=cafe, distance_km=distance))
        ranked.sort(key=lambda item: item.distance_km)
        return ranked[: max(0, limit)]


class InMemoryCatalog(CafeCatalog):
    def __init__(self, cafes: list[Stop]) -> None:
        self._cafes = list(cafes)

    def all(self) -> list[Stop]:
        return list(self._cafes)


class DatabaseCatalog(CafeCatalog):
    def all(self) -> list[Stop]:
        return self._to_stops(Cafe.objects.all())

    def get(self, cafe_id: str) -> Stop:
        cafe = Cafe.objects.filter(cafe_id=cafe_id).first()
        if cafe is None:
            raise NotFoundError(f"Cafe {cafe_id} does not exist")
        stop = self._to_stop(cafe)
        if stop is None:
            raise NotFoundError(f"Cafe {cafe_id} has an invalid catalog record")
        return stop

    def search(
        self,
        query: str = "",
        *,
        cuisine: str = "",
        price_range: str = "",
    ) -> list[Stop]:
        queryset = Cafe.objects.all()
        if cuisine:
            queryset = queryset.filter(cuisine=cuisine)
        if price_range:
            queryset = queryset.filter(price_range=price_range)
        return InMemoryCatalog(self._to_stops(queryset)).search(query)

    def _candidates(self, point: Coordinate, radius_km: float) -> list[Stop]:
        lat_margin, lng_margin = degrees_for_km(radius_km, point.lat)
        queryset = Cafe.objects.filter(
            latitude__isnull=False,
            longitude__isnull=False,
            latitude__gte=point.lat - lat_margin,
            latitude__lte=point.lat + lat_margin,
        )
        # The longitude window is skipped when it would wrap the antimeridian.
        if -180.0 <= point.lng - lng_margin and point.lng + lng_margin <= 180.0:
            queryset = queryset.filter(
                longitude__gte=point.lng - lng_margin,
                longitude__lte=point.lng + lng_margin,
            )
        return self._to_stops(queryset)

    def _to_stops(self, queryset) -> list[Stop]:
        stops = []
        for cafe in queryset.iterator(chunk_size=1000):
            stop = self._to_stop(cafe)
            if stop is not None:
                stops.append(stop)
        return stops

    @staticmethod
    def _to_stop(cafe: Cafe) -> Stop | None:
        coordinates = None
        if cafe.latitude is not None and cafe.longitude is not None:
            coordinates = {"lat": cafe.latitude, "lng": cafe.longitude}

        try:
            return Stop(
                id=cafe.cafe_id,
                name=cafe.name,
                address=cafe.address,
                rating=cafe.rating,
                price_range=cafe.price_range,
                cuisine=cafe.cuisine,
                photos=cafe.photos or [],
                description=cafe.description,
                coordinates=coordinates,
            )
        except pydantic.ValidationError:
            logger.warning("Skipping invalid catalog record %s", cafe.cafe_id)
            return None
