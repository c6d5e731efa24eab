"""
Named key/value stores and search providers backing dimension rows.

Each dimension gets one store and one search provider, looked up by the
dimension's api name.  The registries hand out a single instance per name and
are created by whoever wires the application together, then passed to the
dimension loader -- there is no module-level state here.
"""
from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class KeyValueStore:
    """In-memory key/value store for one dimension's rows."""

    def __init__(self, name: str):
        self.name = name
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def put_all(self, entries: dict[str, str]) -> None:
        with self._lock:
            self._data.update(entries)

    def remove(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class ScanSearchProvider:
    """Search provider that scans its key/value store for matching keys."""

    def __init__(self, name: str):
        self.name = name
        self._store: KeyValueStore | None = None

    def set_key_value_store(self, store: KeyValueStore) -> None:
        self._store = store

    def find_all_keys(self) -> list[str]:
        return self._store.keys() if self._store else []

    def find_keys(self, prefix: str = "", contains: str = "") -> list[str]:
        """Keys starting with *prefix* and containing *contains* (case-insensitive)."""
        prefix, contains = prefix.lower(), contains.lower()
        return [
            k for k in self.find_all_keys()
            if k.lower().startswith(prefix) and contains in k.lower()
        ]


class _Registry(Generic[T]):
    def __init__(self, factory: Callable[[str], T]):
        self._factory = factory
        self._instances: dict[str, T] = {}
        self._lock = threading.Lock()

    def get_instance(self, name: str) -> T:
        """Return the instance registered under *name*, creating it on first use."""
        with self._lock:
            if name not in self._instances:
                self._instances[name] = self._factory(name)
            return self._instances[name]

    def names(self) -> list[str]:
        with self._lock:
            return list(self._instances)


class StoreRegistry(_Registry[KeyValueStore]):
    def __init__(self) -> None:
        super().__init__(KeyValueStore)


class SearchProviderRegistry(_Registry[ScanSearchProvider]):
    def __init__(self) -> None:
        super().__init__(ScanSearchProvider)
