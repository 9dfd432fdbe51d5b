from __future__ import annotations

import logging

from django.conf import settings

from cafe_planner.schemas import Coordinate
from cafe_planner.services.types import UserPosition

logger = logging.getLogger(__name__)


def default_location() -> Coordinate:
    return Coordinate(lat=settings.DEFAULT_LATITUDE, lng=settings.DEFAULT_LONGITUDE)


def locate(lat: float | None = None, lng: float | None = None) -> UserPosition:
    """Best-effort user position, falling back to the configured default location.

    Both coordinates must be present for the reported position to be used; a
    half-supplied position is treated like no position at all.
    """
    if lat is None or lng is None:
        if lat is not None or lng is not None:
            logger.warning("Ignoring partial position lat=%s lng=%s", lat, lng)
        return UserPosition(point=default_location(), is_default=True)

    return UserPosition(point=Coordinate(lat=lat, lng=lng), is_default=False)
