"""Abstract key-value store interface."""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class KeyValueStore(ABC):
    """Abstract persistence interface for pocketbook.

    Values are JSON-compatible structures (dicts, lists, strings, numbers).
    A write is never partially visible: ``save_many`` either stores every
    key or none of them.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the underlying storage."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the underlying storage."""
        pass

    @abstractmethod
    def load(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default if absent."""
        pass

    def save(self, key: str, value: Any) -> None:
        """Store a single value."""
        self.save_many({key: value})

    @abstractmethod
    def save_many(self, items: Mapping[str, Any]) -> None:
        """Store several values in one atomic write."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""
        pass
