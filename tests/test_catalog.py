from __future__ import annotations

import pytest

from cafe_planner.exceptions import NotFoundError
from cafe_planner.models import Cafe
from cafe_planner.schemas import Coordinate, Stop
from cafe_planner.services.catalog import CafeCatalog, DatabaseCatalog, InMemoryCatalog

ORIGIN = Coordinate(lat=1.2839, lng=103.8608)


def _stop(stop_id: str, lat_offset: float | None, **extra) -> Stop:
    coordinates = None
    if lat_offset is not None:
        coordinates = {"lat": ORIGIN.lat + lat_offset, "lng": ORIGIN.lng}
    name = extra.pop("name", f"Cafe {stop_id}")
    return Stop(id=stop_id, name=name, coordinates=coordinates, **extra)


def _cafe(cafe_id: str, lat_offset: float | None, **extra) -> Cafe:
    latitude = None if lat_offset is None else ORIGIN.lat + lat_offset
    longitude = None if lat_offset is None else ORIGIN.lng
    return Cafe.objects.create(
        cafe_id=cafe_id,
        name=extra.pop("name", f"Cafe {cafe_id}"),
        latitude=latitude,
        longitude=longitude,
        **extra,
    )


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog(
        [
            _stop("far", 0.05, cuisine="Japanese"),
            _stop("near", 0.005, cuisine="Italian", price_range="$$"),
            _stop("nowhere", None),
            _stop("mid", 0.01, name="Kopi Corner", cuisine="Local", price_range="$"),
        ]
    )


def test_nearby_is_sorted_and_limited_to_radius(catalog: InMemoryCatalog) -> None:
    nearby = catalog.nearby(ORIGIN, radius_km=2.0)

    assert [item.cafe.id for item in nearby] == ["near", "mid"]
    assert nearby[0].distance_km == pytest.approx(0.556, abs=0.01)


def test_nearby_respects_limit(catalog: InMemoryCatalog) -> None:
    assert [item.cafe.id for item in catalog.nearby(ORIGIN, 10.0, limit=1)] == ["near"]


def test_near_cafe_excludes_origin(catalog: InMemoryCatalog) -> None:
    nearby = catalog.near_cafe("near", radius_km=1.0)

    assert [item.cafe.id for item in nearby] == ["mid"]
    assert catalog.near_cafe("nowhere", radius_km=1.0) == []


def test_search_matches_name_and_filters(catalog: InMemoryCatalog) -> None:
    assert [cafe.id for cafe in catalog.search("kopi")] == ["mid"]
    assert [cafe.id for cafe in catalog.search(cuisine="Italian")] == ["near"]
    assert [cafe.id for cafe in catalog.search(price_range="$")] == ["mid"]


def test_unknown_cafe_raises_not_found(catalog: InMemoryCatalog) -> None:
    with pytest.raises(NotFoundError):
        catalog.get("missing")


@pytest.mark.django_db
def test_database_catalog_converts_rows_to_stops() -> None:
    _cafe("c1", 0.0, rating=4.5, photos=["a.jpg"], cuisine="Cafe")
    _cafe("c2", None)

    first = DatabaseCatalog().get("c1")
    second = DatabaseCatalog().get("c2")

    assert first.coordinates == ORIGIN
    assert first.rating == 4.5
    assert first.photos == ["a.jpg"]
    assert second.coordinates is None
    with pytest.raises(NotFoundError):
        DatabaseCatalog().get("c3")


@pytest.mark.django_db
def test_database_catalog_nearby_uses_bounding_box() -> None:
    _cafe("close", 0.005)
    _cafe("closer", 0.001)
    _cafe("distant", 1.0)
    _cafe("unlocated", None)

    nearby = DatabaseCatalog().nearby(ORIGIN, radius_km=2.0, limit=10)

    assert [item.cafe.id for item in nearby] == ["closer", "close"]


@pytest.mark.django_db
def test_database_catalog_search_filters_in_query() -> None:
    _cafe("c1", 0.0, name="Flat White Bar", cuisine="Australian", price_range="$$")
    _cafe("c2", 0.0, name="Kopi Tiam", cuisine="Local", price_range="$")

    assert [cafe.id for cafe in DatabaseCatalog().search("white")] == ["c1"]
    assert [cafe.id for cafe in DatabaseCatalog().search(cuisine="Local")] == ["c2"]


def test_catalog_base_class_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError):
        CafeCatalog()
