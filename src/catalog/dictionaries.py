"""
Case-insensitive name -> object dictionaries for metrics and dimensions.

Both are populated once at startup and read concurrently afterwards, so they
are plain insertion-ordered dicts keyed by the lower-cased name with no
locking.
"""
from __future__ import annotations

from typing import Generic, Iterable, Iterator, TypeVar

from src.core.errors import DuplicateDimensionError
from src.core.logging import get_logger
from src.request.model import Dimension, LogicalMetric

logger = get_logger(__name__)

T = TypeVar("T")


def _key(name: str) -> str:
    return name.lower()


class _NamedDictionary(Generic[T]):
    def __init__(self, items: Iterable[T] | None = None):
        self._by_name: dict[str, T] = {}
        if items:
            self.add_all(items)

    def _name_of(self, item: T) -> str:
        raise NotImplementedError

    def find_by_name(self, name: str) -> T | None:
        return self._by_name.get(_key(name))

    def find_all(self) -> frozenset[T]:
        return frozenset(self._by_name.values())

    def add(self, item: T) -> bool:
        """Register *item*; returns ``False`` if its name is already taken."""
        key = _key(self._name_of(item))
        if key in self._by_name:
            return False
        self._by_name[key] = item
        return True

    def add_all(self, items: Iterable[T]) -> bool:
        changed = False
        for item in items:
            changed = self.add(item) or changed
        return changed

    def names(self) -> list[str]:
        return [self._name_of(v) for v in self._by_name.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._by_name

    def __iter__(self) -> Iterator[T]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.names()})"


class MetricDictionary(_NamedDictionary[LogicalMetric]):
    """Logical metrics keyed by name."""

    def _name_of(self, item: LogicalMetric) -> str:
        return item.name


class DimensionDictionary(_NamedDictionary[Dimension]):
    """Dimensions keyed by api name."""

    def _name_of(self, item: Dimension) -> str:
        return item.api_name

    def register(self, dimension: Dimension) -> None:
        """Add *dimension* during a loader pass; a clash aborts the load."""
        if not self.add(dimension):
            exc = DuplicateDimensionError(
                f"Dimension '{dimension.api_name}' is already registered; "
                "multiple loaders updating the dimension dictionary"
            )
            logger.error("%s", exc)
            raise exc
