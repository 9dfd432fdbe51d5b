from __future__ import annotations

import pytest

from cafe_planner.exceptions import NotFoundError, ValidationError
from cafe_planner.schemas import Plan, Stop, TransportMode
from cafe_planner.services.plan_store import CURRENT_PLAN_KEY, PAST_PLANS_KEY, PlanStore
from cafe_planner.services.storage import InMemoryStorage


def _plan(*stop_ids: str, start_time: str = "09:00") -> Plan:
    return Plan(
        cafes=[
            Stop(
                id=stop_id,
                name=f"Cafe {stop_id}",
                coordinates={"lat": 1.28 + index * 0.01, "lng": 103.86},
                order=index + 1,
            )
            for index, stop_id in enumerate(stop_ids)
        ],
        start_time=start_time,
    )


def test_missing_current_plan_loads_empty_default(store: PlanStore) -> None:
    plan = store.load_current_plan()

    assert plan.cafes == []
    assert plan.start_time == "09:00"
    assert plan.transport_mode == TransportMode.WALKING


def test_current_plan_is_persisted_with_camel_case_keys(
    store: PlanStore, storage: InMemoryStorage
) -> None:
    store.save_current_plan(_plan("a", "b", start_time="10:30"))

    record = storage.get(CURRENT_PLAN_KEY)
    assert record["startTime"] == "10:30"
    assert record["transportMode"] == "walking"
    assert record["cafes"][0]["timeSlot"] == ""
    assert [stop.id for stop in store.load_current_plan().cafes] == ["a", "b"]


def test_legacy_record_shape_is_accepted(storage: InMemoryStorage, store: PlanStore) -> None:
    storage.set(
        CURRENT_PLAN_KEY,
        {
            "cafes": [
                {
                    "id": 7,
                    "name": "Legacy",
                    "coordinates": {"lat": 1.3, "lng": 103.8},
                    "notes": None,
                    "menu": ["latte"],
                }
            ],
            "startTime": "08:15",
            "transportMode": "public",
            "date": "2024-01-01T00:00:00.000Z",
        },
    )

    plan = store.load_current_plan()

    assert plan.cafes[0].id == "7"
    assert plan.cafes[0].notes == ""
    assert plan.transport_mode == TransportMode.PUBLIC_TRANSIT


def test_malformed_current_plan_falls_back_to_default(
    storage: InMemoryStorage, store: PlanStore
) -> None:
    storage.set(CURRENT_PLAN_KEY, {"cafes": "not a list", "startTime": "noon"})

    assert store.load_current_plan() == Plan()


def test_non_finite_coordinates_are_rejected_on_load(
    storage: InMemoryStorage, store: PlanStore
) -> None:
    storage.set(
        CURRENT_PLAN_KEY,
        {"cafes": [{"id": "a", "coordinates": {"lat": float("nan"), "lng": 103.8}}]},
    )

    assert store.load_current_plan().is_empty


def test_promoting_empty_plan_fails_and_leaves_archive_untouched(
    store: PlanStore, storage: InMemoryStorage
) -> None:
    store.save_current_plan(Plan(start_time="11:00"))

    with pytest.raises(ValidationError):
        store.promote_to_archive(store.load_current_plan())

    assert store.list_archive() == []
    assert PAST_PLANS_KEY not in storage
    assert store.load_current_plan().start_time == "11:00"


def test_promoting_plan_archives_copy_and_clears_current_slot(
    store: PlanStore, storage: InMemoryStorage
) -> None:
    plan = _plan("a", "b", "c")
    store.save_current_plan(plan)

    archived = store.promote_to_archive(plan)

    archive = store.list_archive()
    assert len(archive) == 1
    assert archive[0].id == archived.id
    assert archive[0].cafes == plan.cafes
    assert archive[0].completed is False
    assert archive[0].date == archived.date
    assert CURRENT_PLAN_KEY not in storage
    assert store.load_current_plan().is_empty


def test_archive_is_most_recent_first_with_unique_ids(store: PlanStore) -> None:
    first = store.promote_to_archive(_plan("a"))
    second = store.promote_to_archive(_plan("b"))

    archive = store.list_archive()

    assert [plan.id for plan in archive] == [second.id, first.id]
    assert first.id != second.id
    assert int(second.id) > int(first.id)


def test_malformed_archive_entries_are_skipped(
    store: PlanStore, storage: InMemoryStorage
) -> None:
    archived = store.promote_to_archive(_plan("a"))
    storage.set(PAST_PLANS_KEY, [{"unexpected": True}, *storage.get(PAST_PLANS_KEY)])

    assert [plan.id for plan in store.list_archive()] == [archived.id]


def test_set_completed_updates_only_the_flag(store: PlanStore) -> None:
    archived = store.promote_to_archive(_plan("a", "b"))

    updated = store.set_completed(archived.id)

    assert updated.completed is True
    stored = store.get_archived(archived.id)
    assert stored.completed is True
    assert stored.cafes == archived.cafes


def test_unknown_archived_plan_raises_not_found(store: PlanStore) -> None:
    with pytest.raises(NotFoundError):
        store.get_archived("missing")
    with pytest.raises(NotFoundError):
        store.set_completed("missing")


def test_reuse_copies_archived_plan_into_current_slot(store: PlanStore) -> None:
    archived = store.promote_to_archive(_plan("a", "b", start_time="14:00"))
    store.save_current_plan(_plan("z"))

    plan = store.reuse_archived(archived.id)

    current = store.load_current_plan()
    assert current == plan
    assert [stop.id for stop in current.cafes] == ["a", "b"]
    assert current.start_time == "14:00"
    assert len(store.list_archive()) == 1


def test_clear_current_plan_is_idempotent(store: PlanStore) -> None:
    store.save_current_plan(_plan("a"))

    store.clear_current_plan()
    store.clear_current_plan()

    assert store.load_current_plan().is_empty


def test_favorites_and_visits_are_recorded_once(store: PlanStore) -> None:
    store.add_to_favorites("a")
    store.add_to_favorites("a")
    store.mark_as_visited("b")

    data = store.load_user_data()

    assert data.favorite_cafes == ["a"]
    assert data.visited_cafes == ["b"]
