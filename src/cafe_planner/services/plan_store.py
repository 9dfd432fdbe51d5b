from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

import pydantic
from django.utils import timezone

from cafe_planner.exceptions import NotFoundError, ValidationError
from cafe_planner.schemas import ArchivedPlan, Plan, UserData
from cafe_planner.services.storage import KeyValueStorage

logger = logging.getLogger(__name__)

CURRENT_PLAN_KEY = "currentPlan"
PAST_PLANS_KEY = "pastPlans"
USER_DATA_KEY = "userData"


class PlanStore:
    """Current plan, plan archive and user data persisted in a key-value storage.

    Every value is written back whole; the last write wins. ``lock`` serializes
    read-modify-write sequences for callers sharing one store instance.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.storage = storage
        self.clock = clock or timezone.now
        self.lock = threading.RLock()
        self._last_id = 0

    def load_current_plan(self) -> Plan:
        raw = self.storage.get(CURRENT_PLAN_KEY)
        if raw is None:
            return Plan()

        try:
            return Plan.model_validate(raw)
        except pydantic.ValidationError as exc:
            logger.warning(
                "Ignoring malformed current plan record (%d errors)", exc.error_count()
            )
            return Plan()

    def save_current_plan(self, plan: Plan) -> None:
        with self.lock:
            self.storage.set(CURRENT_PLAN_KEY, plan.to_record())

    def clear_current_plan(self) -> None:
        with self.lock:
            self.storage.delete(CURRENT_PLAN_KEY)

    def promote_to_archive(self, plan: Plan) -> ArchivedPlan:
        if plan.is_empty:
            raise ValidationError("Cannot save an empty plan")

        with self.lock:
            records = self._archive_records()
            archived = ArchivedPlan(
                cafes=[stop.model_copy(deep=True) for stop in plan.cafes],
                start_time=plan.start_time,
                transport_mode=plan.transport_mode,
                id=self._next_id(records),
                date=self.clock(),
                completed=False,
            )
            self.storage.set(PAST_PLANS_KEY, [archived.to_record(), *records])
            self.storage.delete(CURRENT_PLAN_KEY)

        logger.info("Archived plan %s with %d stops", archived.id, len(archived.cafes))
        return archived

    def list_archive(self) -> list[ArchivedPlan]:
        plans: list[ArchivedPlan] = []
        for record in self._archive_records():
            try:
                plans.append(ArchivedPlan.model_validate(record))
            except pydantic.ValidationError as exc:
                logger.warning(
                    "Skipping malformed archived plan record (%d errors)", exc.error_count()
                )
        return plans

    def get_archived(self, plan_id: str) -> ArchivedPlan:
        for archived in self.list_archive():
            if archived.id == plan_id:
                return archived
        raise NotFoundError(f"Archived plan {plan_id} does not exist")

    def set_completed(self, plan_id: str, completed: bool = True) -> ArchivedPlan:
        with self.lock:
            records = self._archive_records()
            for index, record in enumerate(records):
                if not isinstance(record, dict) or str(record.get("id")) != plan_id:
                    continue
                try:
                    archived = ArchivedPlan.model_validate(record)
                except pydantic.ValidationError as exc:
                    raise ValidationError(f"Archived plan {plan_id} is malformed") from exc

                archived = archived.model_copy(update={"completed": completed})
                records[index] = archived.to_record()
                self.storage.set(PAST_PLANS_KEY, records)
                return archived

        raise NotFoundError(f"Archived plan {plan_id} does not exist")

    def reuse_archived(self, plan_id: str) -> Plan:
        with self.lock:
            plan = self.get_archived(plan_id).as_plan()
            self.save_current_plan(plan)
        logger.info("Reused archived plan %s as current plan", plan_id)
        return plan

    def load_user_data(self) -> UserData:
        raw = self.storage.get(USER_DATA_KEY)
        if raw is None:
            return UserData()

        try:
            return UserData.model_validate(raw)
        except pydantic.ValidationError:
            logger.warning("Ignoring malformed user data record")
            return UserData()

    def add_to_favorites(self, cafe_id: str) -> UserData:
        with self.lock:
            data = self.load_user_data()
            if cafe_id not in data.favorite_cafes:
                data = data.model_copy(update={"favorite_cafes": [*data.favorite_cafes, cafe_id]})
                self.storage.set(USER_DATA_KEY, data.to_record())
        return data

    def mark_as_visited(self, cafe_id: str) -> UserData:
        with self.lock:
            data = self.load_user_data()
            if cafe_id not in data.visited_cafes:
                data = data.model_copy(update={"visited_cafes": [*data.visited_cafes, cafe_id]})
                self.storage.set(USER_DATA_KEY, data.to_record())
        return data

    def _archive_records(self) -> list[Any]:
        raw = self.storage.get(PAST_PLANS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed plan archive record of type %s", type(raw).__name__)
            return []
        return raw

    def _next_id(self, records: list[Any]) -> str:
        # Millisecond timestamps, bumped so ids stay unique and increasing.
        candidate = int(self.clock().timestamp() * 1000)
        existing = [
            int(record["id"])
            for record in records
            if isinstance(record, dict) and str(record.get("id", "")).isdigit()
        ]
        floor = max([self._last_id, *existing], default=0)
        self._last_id = max(candidate, floor + 1)
        return str(self._last_id)
