from __future__ import annotations

import logging
import random

from django.conf import settings

from cafe_planner.exceptions import MissingLocationError, NotFoundError, ValidationError
from cafe_planner.schemas import (
    DEFAULT_START_TIME,
    NOTES_MAX_LENGTH,
    ArchivedPlan,
    Plan,
    Stop,
    TransportMode,
)
from cafe_planner.services.catalog import CafeCatalog
from cafe_planner.services.optimization import (
    assign_time_slots,
    format_clock,
    optimize_route,
    parse_clock,
    renumber,
    summarize_route,
)
from cafe_planner.services.plan_store import PlanStore
from cafe_planner.services.types import RouteSummary

logger = logging.getLogger(__name__)

SURPRISE_SIZES = (3, 4, 5)


class ItineraryService:
    """Applies user edits to the current plan held by a ``PlanStore``.

    Each mutation loads the current plan, builds and validates a new plan
    value, and persists it only when every check has passed. A failed call
    leaves the stored plan untouched.
    """

    def __init__(
        self,
        store: PlanStore,
        catalog: CafeCatalog | None = None,
        rng: random.Random | None = None,
        walking_only: bool | None = None,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.walking_only = settings.WALKING_ONLY if walking_only is None else walking_only

    def current_plan(self) -> Plan:
        return self.store.load_current_plan()

    def add_stop(self, stop: Stop) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            if plan.find(stop.id) is not None:
                raise ValidationError(f"Cafe {stop.id} is already in the plan")

            added = stop.model_copy(
                update={"order": len(plan.cafes) + 1, "notes": "", "time_slot": ""}
            )
            updated = plan.model_copy(update={"cafes": [*plan.cafes, added]})
            self.store.save_current_plan(updated)

        logger.info("Added cafe %s at position %d", stop.id, added.order)
        return updated

    def add_cafe(self, cafe_id: str) -> Plan:
        return self.add_stop(self._require_catalog().get(cafe_id))

    def reorder(self, from_index: int, to_index: int) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            size = len(plan.cafes)
            if not (0 <= from_index < size and 0 <= to_index < size):
                raise ValidationError(
                    f"Cannot move position {from_index} to {to_index} in a plan of {size} stops"
                )

            cafes = list(plan.cafes)
            cafes.insert(to_index, cafes.pop(from_index))
            updated = self._with_stops(plan, cafes)
            self.store.save_current_plan(updated)

        return updated

    def move_stop(self, stop_id: str, target_id: str) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            return self.reorder(self._index_of(plan, stop_id), self._index_of(plan, target_id))

    def remove_stop(self, stop_id: str) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            self._index_of(plan, stop_id)

            cafes = [stop for stop in plan.cafes if stop.id != stop_id]
            updated = self._with_stops(plan, cafes)
            self.store.save_current_plan(updated)

        logger.info("Removed cafe %s, %d stops left", stop_id, len(updated.cafes))
        return updated

    def annotate(self, stop_id: str, notes: str) -> Plan:
        if len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"Notes are too long, maximum {NOTES_MAX_LENGTH} characters")

        with self.store.lock:
            plan = self.store.load_current_plan()
            index = self._index_of(plan, stop_id)

            cafes = list(plan.cafes)
            cafes[index] = cafes[index].model_copy(update={"notes": notes})
            updated = plan.model_copy(update={"cafes": cafes})
            self.store.save_current_plan(updated)

        return updated

    def optimize(self) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            if plan.is_empty:
                raise ValidationError("Your plan is empty, add some cafes first")

            located = [stop for stop in plan.cafes if stop.has_location]
            if not located:
                raise MissingLocationError("None of the cafes in the plan have location data")

            optimized = optimize_route(located, plan.start_time, self._routing_mode(plan))
            updated = plan.model_copy(update={"cafes": optimized})
            self.store.save_current_plan(updated)

        dropped = len(plan.cafes) - len(located)
        if dropped:
            logger.warning("Dropped %d cafes without coordinates while optimizing", dropped)
        logger.info("Optimized route over %d cafes", len(optimized))
        return updated

    def set_start_time(self, start_time: str) -> Plan:
        normalized = format_clock(parse_clock(start_time))

        with self.store.lock:
            plan = self.store.load_current_plan()
            cafes = assign_time_slots(plan.cafes, normalized, self._routing_mode(plan))
            updated = plan.model_copy(update={"start_time": normalized, "cafes": cafes})
            self.store.save_current_plan(updated)

        return updated

    def set_transport_mode(self, mode: TransportMode | str) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            updated = plan.model_copy(update={"transport_mode": TransportMode.coerce(mode)})
            if self._is_scheduled(updated):
                updated = self._with_stops(updated, updated.cafes)
            self.store.save_current_plan(updated)

        return updated

    def clear(self) -> Plan:
        with self.store.lock:
            plan = self.store.load_current_plan()
            updated = plan.model_copy(update={"cafes": []})
            self.store.save_current_plan(updated)

        logger.info("Cleared current plan")
        return updated

    def save_plan(self) -> ArchivedPlan:
        with self.store.lock:
            return self.store.promote_to_archive(self.store.load_current_plan())

    def reuse(self, plan_id: str) -> Plan:
        return self.store.reuse_archived(plan_id)

    def mark_completed(self, plan_id: str, completed: bool = True) -> ArchivedPlan:
        return self.store.set_completed(plan_id, completed)

    def surprise(self, count: int | None = None) -> Plan:
        """Draw a random plan from the catalog without persisting it."""
        cafes = self._require_catalog().all()
        shuffled = self.rng.sample(cafes, len(cafes))
        size = count if count is not None else self.rng.choice(SURPRISE_SIZES)
        if size < 1:
            raise ValidationError("A surprise plan needs at least one cafe")
        selected = [
            stop.model_copy(update={"notes": "", "time_slot": ""}) for stop in shuffled[:size]
        ]
        return Plan(
            cafes=renumber(selected),
            start_time=DEFAULT_START_TIME,
            transport_mode=TransportMode.WALKING,
        )

    def accept_plan(self, plan: Plan) -> Plan:
        if plan.is_empty:
            raise ValidationError("Generate a plan first")
        ids = [stop.id for stop in plan.cafes]
        if len(set(ids)) != len(ids):
            raise ValidationError("A plan cannot visit the same cafe twice")

        # Time slots are derived, never taken from the caller.
        cafes = [stop.model_copy(update={"time_slot": ""}) for stop in plan.cafes]
        accepted = plan.model_copy(update={"cafes": renumber(cafes)})
        with self.store.lock:
            self.store.save_current_plan(accepted)
        return accepted

    def route_summary(self) -> RouteSummary:
        plan = self.store.load_current_plan()
        return summarize_route(plan.cafes, self._routing_mode(plan))

    def _with_stops(self, plan: Plan, cafes: list[Stop]) -> Plan:
        # Renumber, and re-derive time slots when the plan was already scheduled.
        if self._is_scheduled(plan):
            cafes = assign_time_slots(cafes, plan.start_time, self._routing_mode(plan))
        else:
            cafes = renumber(cafes)
        return plan.model_copy(update={"cafes": cafes})

    def _routing_mode(self, plan: Plan) -> TransportMode:
        return TransportMode.WALKING if self.walking_only else plan.transport_mode

    def _require_catalog(self) -> CafeCatalog:
        if self.catalog is None:
            raise NotFoundError("No cafe catalog is configured")
        return self.catalog

    @staticmethod
    def _is_scheduled(plan: Plan) -> bool:
        return any(stop.time_slot for stop in plan.cafes)

    @staticmethod
    def _index_of(plan: Plan, stop_id: str) -> int:
        for index, stop in enumerate(plan.cafes):
            if stop.id == stop_id:
                return index
        raise NotFoundError(f"Cafe {stop_id} is not in the plan")
