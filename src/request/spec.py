"""
DataQuerySpec -- the fully-resolved, immutable description of one data query.

A spec is built once per request and then threaded through the stages of
request interpretation.  Stages never mutate it: every ``with_*`` method
returns a new spec that differs from the receiver in exactly one facet, and
the receiver stays valid.

Every collection handed in is copied on the way in and exposed read-only:
ordered sets become tuples, mappings become ``MappingProxyType`` views over
private dicts, predicate sets become frozensets.  The spec performs no
cross-field validation.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import tzinfo
from types import MappingProxyType
from typing import Iterable, Mapping, Union
from zoneinfo import ZoneInfo

from src.core.config import get_settings
from src.core.utils import ordered_unique
from src.request.model import (
    ApiFilter,
    ApiHaving,
    Dimension,
    DimensionField,
    Interval,
    LogicalMetric,
    LogicalTable,
    OrderByColumn,
    PaginationParameters,
    ResponseFormatType,
)
from src.request.sorts import combine_sorts, extract_standard_sorts, extract_time_sort
from src.request.time_grain import Granularity

FilterInput = Union[Mapping[Dimension, Iterable[ApiFilter]], Iterable[ApiFilter]]


def _freeze_dimension_fields(
    raw: Mapping[Dimension, Iterable[DimensionField]] | None,
) -> Mapping[Dimension, tuple[DimensionField, ...]]:
    return MappingProxyType({dim: ordered_unique(fields) for dim, fields in (raw or {}).items()})


def _freeze_filters(raw: FilterInput | None) -> Mapping[Dimension, frozenset[ApiFilter]]:
    """Group filters by dimension.  Accepts a mapping or a flat iterable of filters."""
    grouped: dict[Dimension, set[ApiFilter]] = {}
    if isinstance(raw, Mapping):
        for dim, filters in raw.items():
            grouped.setdefault(dim, set()).update(filters)
    else:
        for api_filter in raw or ():
            grouped.setdefault(api_filter.dimension, set()).add(api_filter)
    return MappingProxyType({dim: frozenset(filters) for dim, filters in grouped.items()})


def _freeze_havings(
    raw: Mapping[LogicalMetric, Iterable[ApiHaving]] | None,
) -> Mapping[LogicalMetric, frozenset[ApiHaving]]:
    return MappingProxyType({metric: frozenset(hs) for metric, hs in (raw or {}).items()})


@dataclass(frozen=True, kw_only=True)
class DataQuerySpec:
    """Immutable query specification.

    ``all_sorts`` is the only stored sort state; ``sorts`` and
    ``date_time_sort`` are views derived from it.
    """

    table: LogicalTable
    granularity: Granularity
    dimensions: tuple[Dimension, ...] = ()
    dimension_fields: Mapping[Dimension, tuple[DimensionField, ...]] = field(default_factory=dict)
    metrics: tuple[LogicalMetric, ...] = ()
    intervals: tuple[Interval, ...] = ()
    filters: Mapping[Dimension, frozenset[ApiFilter]] = field(default_factory=dict)
    havings: Mapping[LogicalMetric, frozenset[ApiHaving]] = field(default_factory=dict)
    all_sorts: tuple[OrderByColumn, ...] = ()
    count: int | None = None
    top_n: int | None = None
    format: ResponseFormatType
    download_filename: str | None = None
    time_zone: tzinfo
    async_after: int
    pagination_parameters: PaginationParameters | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", ordered_unique(self.dimensions))
        object.__setattr__(self, "dimension_fields", _freeze_dimension_fields(self.dimension_fields))
        object.__setattr__(self, "metrics", ordered_unique(self.metrics))
        object.__setattr__(self, "intervals", tuple(self.intervals or ()))
        object.__setattr__(self, "filters", _freeze_filters(self.filters))
        object.__setattr__(self, "havings", _freeze_havings(self.havings))
        object.__setattr__(self, "all_sorts", ordered_unique(self.all_sorts))

    @classmethod
    def build(
        cls,
        table: LogicalTable,
        granularity: Granularity,
        *,
        format: ResponseFormatType | None = None,
        time_zone: tzinfo | None = None,
        async_after: int | None = None,
        **facets,
    ) -> DataQuerySpec:
        """Construct a spec, filling format / time zone / async threshold from settings."""
        settings = get_settings()
        return cls(
            table=table,
            granularity=granularity,
            format=format or ResponseFormatType.from_name(settings.default_format),
            time_zone=time_zone or ZoneInfo(settings.default_time_zone),
            async_after=settings.default_async_after_ms if async_after is None else async_after,
            **facets,
        )

    # ── Derived views ───────────────────────────────────

    @property
    def sorts(self) -> tuple[OrderByColumn, ...]:
        """Standard (non-time) sorts, in the order given."""
        return extract_standard_sorts(self.all_sorts)

    @property
    def date_time_sort(self) -> OrderByColumn | None:
        return extract_time_sort(self.all_sorts)

    @property
    def has_time_sort(self) -> bool:
        return self.date_time_sort is not None

    @property
    def is_download(self) -> bool:
        return self.download_filename is not None

    # ── Withers ─────────────────────────────────────────

    def with_table(self, table: LogicalTable) -> DataQuerySpec:
        return replace(self, table=table)

    def with_granularity(self, granularity: Granularity) -> DataQuerySpec:
        return replace(self, granularity=granularity)

    def with_dimensions(self, dimensions: Iterable[Dimension]) -> DataQuerySpec:
        return replace(self, dimensions=dimensions)

    def with_dimension_fields(
        self, dimension_fields: Mapping[Dimension, Iterable[DimensionField]]
    ) -> DataQuerySpec:
        return replace(self, dimension_fields=dimension_fields)

    def with_metrics(self, metrics: Iterable[LogicalMetric]) -> DataQuerySpec:
        return replace(self, metrics=metrics)

    def with_intervals(self, intervals: Iterable[Interval]) -> DataQuerySpec:
        return replace(self, intervals=intervals)

    def with_filters(self, filters: FilterInput) -> DataQuerySpec:
        return replace(self, filters=filters)

    def with_havings(self, havings: Mapping[LogicalMetric, Iterable[ApiHaving]]) -> DataQuerySpec:
        return replace(self, havings=havings)

    def with_sorts(self, sorts: Iterable[OrderByColumn]) -> DataQuerySpec:
        """Replace the standard sorts, keeping the current time sort in front."""
        return replace(self, all_sorts=combine_sorts(self.date_time_sort, sorts))

    def with_time_sort(self, time_sort: OrderByColumn | None) -> DataQuerySpec:
        """Replace (or with ``None``, drop) the time sort, keeping the standard sorts."""
        return replace(self, all_sorts=combine_sorts(time_sort, self.sorts))

    def with_all_sorts(self, all_sorts: Iterable[OrderByColumn]) -> DataQuerySpec:
        # Kept as given apart from dropping repeated directives; the caller
        # guarantees at most one time sort.
        return replace(self, all_sorts=all_sorts)

    def with_count(self, count: int | None) -> DataQuerySpec:
        return replace(self, count=count)

    def with_top_n(self, top_n: int | None) -> DataQuerySpec:
        return replace(self, top_n=top_n)

    def with_format(self, format: ResponseFormatType) -> DataQuerySpec:
        return replace(self, format=format)

    def with_download_filename(self, download_filename: str | None) -> DataQuerySpec:
        return replace(self, download_filename=download_filename)

    def with_time_zone(self, time_zone: tzinfo) -> DataQuerySpec:
        return replace(self, time_zone=time_zone)

    def with_async_after(self, async_after: int) -> DataQuerySpec:
        return replace(self, async_after=async_after)

    def with_pagination_parameters(
        self, pagination_parameters: PaginationParameters | None
    ) -> DataQuerySpec:
        return replace(self, pagination_parameters=pagination_parameters)
