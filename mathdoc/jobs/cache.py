import threading
from typing import Generic, TypeVar

from mathdoc.logging.logger import Log

T = TypeVar("T")


class ResultCache(Generic[T]):
    """Write-once keyed store; the first value stored under a key is kept."""

    def __init__(self, name: str, log: Log | None = None) -> None:
        self._name = name
        self._entries: dict[str, T] = {}
        self._lock = threading.Lock()
        self._log = log or Log.for_component("jobs.cache")

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: T) -> T:
        """Store ``value`` unless ``key`` is already present; return the stored value."""
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                self._log.debug(f"{self._name} cache already holds {key}, keeping first value")
                return existing
            self._entries[key] = value
            return value

    def clear(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
