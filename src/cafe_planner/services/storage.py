from __future__ import annotations

import copy
from typing import Any, Protocol

from cafe_planner.models import StoredValue


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStorage:
    """Dict-backed storage, values are copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._values.get(key))

    def set(self, key: str, value: Any) -> None:
        self._values[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values


class DatabaseStorage:
    def __init__(self, namespace: str = "") -> None:
        self.namespace = namespace

    def get(self, key: str) -> Any | None:
        record = StoredValue.objects.filter(key=self._key(key)).only("value").first()
        return None if record is None else record.value

    def set(self, key: str, value: Any) -> None:
        StoredValue.objects.update_or_create(key=self._key(key), defaults={"value": value})

    def delete(self, key: str) -> None:
        StoredValue.objects.filter(key=self._key(key)).delete()

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key
