"""In-process key-value store."""

import copy
from typing import Any, Mapping, Optional

from pocketbook.database.base import KeyValueStore


class InMemoryStore(KeyValueStore):
    """Dictionary-backed store. Values are deep-copied on the way in and out."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def load(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def save_many(self, items: Mapping[str, Any]) -> None:
        staged = {key: copy.deepcopy(value) for key, value in items.items()}
        self._data.update(staged)

    def keys(self) -> list[str]:
        return sorted(self._data)
