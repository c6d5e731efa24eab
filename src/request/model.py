"""
Typed value objects referenced by a query specification.

Everything here is a frozen dataclass or an enum so that a
``DataQuerySpec`` can hold them without copying.  List-valued arguments are
frozen into tuples on construction.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.core.utils import ordered_unique
from src.request.time_grain import Granularity

DATE_TIME = "dateTime"  # reserved sort column for the time dimension


def _freeze(obj: object, attr: str) -> None:
    object.__setattr__(obj, attr, ordered_unique(getattr(obj, attr)))


# ── Tables, dimensions, metrics ──────────────────────────

@dataclass(frozen=True)
class LogicalTable:
    name: str
    granularities: tuple[Granularity, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        _freeze(self, "granularities")


@dataclass(frozen=True)
class DimensionField:
    name: str
    description: str = ""


@dataclass(frozen=True)
class Dimension:
    api_name: str
    description: str = ""
    long_name: str = ""
    category: str = ""
    fields: tuple[DimensionField, ...] = ()
    default_fields: tuple[DimensionField, ...] = ()
    key_value_store: Any = field(default=None, compare=False, repr=False)
    search_provider: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        _freeze(self, "fields")
        _freeze(self, "default_fields")
        if not self.long_name:
            object.__setattr__(self, "long_name", self.api_name)

    def field_by_name(self, name: str) -> DimensionField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass(frozen=True)
class LogicalMetric:
    name: str
    expression: str = ""
    description: str = ""
    category: str = "General"
    dependencies: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "dependencies")


# ── Intervals ────────────────────────────────────────────

@dataclass(frozen=True)
class Interval:
    """Half-open time interval ``[start, end)``."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Interval end {self.end} is before start {self.start}")

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def overlaps(self, other: Interval) -> bool:
        return self.start < other.end and other.start < self.end


# ── Sorting ──────────────────────────────────────────────

class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class OrderByColumn:
    """A single sort directive: a target column and a direction."""
    column: str
    direction: SortDirection = SortDirection.DESC

    @property
    def is_time_sort(self) -> bool:
        return self.column == DATE_TIME

    @classmethod
    def time_sort(cls, direction: SortDirection = SortDirection.ASC) -> OrderByColumn:
        return cls(DATE_TIME, direction)


# ── Filters & havings ────────────────────────────────────

class FilterOperation(Enum):
    IN = "in"
    NOT_IN = "notin"
    STARTS_WITH = "startswith"
    CONTAINS = "contains"
    EQ = "eq"


@dataclass(frozen=True)
class ApiFilter:
    """Pre-aggregation predicate on one dimension field."""
    dimension: Dimension
    field: DimensionField
    operation: FilterOperation
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _freeze(self, "values")


class HavingOperation(Enum):
    EQUAL_TO = "equalTo"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    BETWEEN = "between"
    NOT_EQUAL_TO = "notEqualTo"
    NOT_GREATER_THAN = "notGreaterThan"
    NOT_LESS_THAN = "notLessThan"
    NOT_BETWEEN = "notBetween"


@dataclass(frozen=True)
class ApiHaving:
    """Post-aggregation predicate on one metric."""
    metric: LogicalMetric
    operation: HavingOperation
    values: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


# ── Response shaping ─────────────────────────────────────

class ResponseFormatType(Enum):
    JSON = "json"
    CSV = "csv"
    JSONAPI = "jsonapi"
    DEBUG = "debug"

    @classmethod
    def from_name(cls, name: str) -> ResponseFormatType:
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown response format '{name}'. "
                f"Allowed: {', '.join(f.value for f in cls)}"
            ) from None


@dataclass(frozen=True)
class PaginationParameters:
    per_page: int
    page: int = 1

    def __post_init__(self) -> None:
        if self.per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {self.per_page}")
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
