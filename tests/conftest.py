from __future__ import annotations

from datetime import datetime, timezone

import pytest
from django.test import Client

from cafe_planner import views
from cafe_planner.services.plan_store import PlanStore
from cafe_planner.services.storage import InMemoryStorage

FIXED_NOW = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def api_client() -> Client:
    return Client()


@pytest.fixture(autouse=True)
def _reset_shared_state(monkeypatch) -> None:
    monkeypatch.setattr(views, "_itinerary_service", None)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage: InMemoryStorage) -> PlanStore:
    return PlanStore(storage, clock=lambda: FIXED_NOW)

