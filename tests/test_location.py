from __future__ import annotations

import pytest

from cafe_planner.schemas import Coordinate
from cafe_planner.services.location import default_location, locate

MARINA_BAY = Coordinate(lat=1.2839, lng=103.8608)


@pytest.fixture(autouse=True)
def _marina_bay_default(settings) -> None:
    settings.DEFAULT_LATITUDE = MARINA_BAY.lat
    settings.DEFAULT_LONGITUDE = MARINA_BAY.lng


def test_reported_position_is_used() -> None:
    position = locate(1.3521, 103.8198)

    assert position.point == Coordinate(lat=1.3521, lng=103.8198)
    assert position.is_default is False


@pytest.mark.parametrize(("lat", "lng"), [(None, None), (1.3521, None), (None, 103.8198)])
def test_missing_position_falls_back_to_marina_bay(lat, lng) -> None:
    position = locate(lat, lng)

    assert position.point == MARINA_BAY
    assert position.is_default is True


def test_default_location_follows_settings(settings) -> None:
    settings.DEFAULT_LATITUDE = 48.8566
    settings.DEFAULT_LONGITUDE = 2.3522

    assert default_location() == Coordinate(lat=48.8566, lng=2.3522)
    assert locate().point == Coordinate(lat=48.8566, lng=2.3522)
