"""
Unit tests -- request value types and time grains.
"""
from datetime import datetime, timezone

import pytest

from src.request.model import (
    ApiFilter,
    Dimension,
    DimensionField,
    FilterOperation,
    Interval,
    LogicalTable,
    PaginationParameters,
    ResponseFormatType,
)
from src.request.time_grain import AllGranularity, TimeGrain


def _dt(day: int) -> datetime:
    return datetime(2024, 1, day, tzinfo=timezone.utc)


# ── TimeGrain ───────────────────────────────────────────

def test_time_grain_from_enum_name():
    assert TimeGrain.from_name("DAY") is TimeGrain.DAY


def test_time_grain_from_api_name():
    assert TimeGrain.from_name("month") is TimeGrain.MONTH
    assert TimeGrain.from_name(" Hour ") is TimeGrain.HOUR


def test_time_grain_unknown():
    with pytest.raises(ValueError, match="Unknown time grain"):
        TimeGrain.from_name("fortnight")


def test_all_granularity_api_name():
    assert AllGranularity.ALL.api_name == "all"
    assert TimeGrain.WEEK.api_name == "week"


# ── Interval ────────────────────────────────────────────

def test_interval_is_half_open():
    iv = Interval(_dt(1), _dt(2))
    assert iv.contains(_dt(1))
    assert not iv.contains(_dt(2))


def test_interval_overlap():
    assert Interval(_dt(1), _dt(3)).overlaps(Interval(_dt(2), _dt(4)))
    assert not Interval(_dt(1), _dt(2)).overlaps(Interval(_dt(2), _dt(3)))


def test_interval_rejects_reversed_bounds():
    with pytest.raises(ValueError):
        Interval(_dt(3), _dt(1))


# ── Dimension / filters ─────────────────────────────────

def test_dimension_freezes_fields_and_defaults_long_name():
    fields = [DimensionField("id"), DimensionField("desc")]
    dim = Dimension("country", fields=fields)
    fields.append(DimensionField("extra"))
    assert dim.fields == (DimensionField("id"), DimensionField("desc"))
    assert dim.long_name == "country"
    assert dim.field_by_name("desc") == DimensionField("desc")
    assert dim.field_by_name("nope") is None


def test_dimension_equality_ignores_stores():
    assert Dimension("page", key_value_store=object()) == Dimension("page")
    assert hash(Dimension("page", key_value_store=object())) == hash(Dimension("page"))


def test_filter_values_frozen():
    dim = Dimension("country")
    f = ApiFilter(dim, DimensionField("id"), FilterOperation.IN, ["US", "US", "IN"])
    assert f.values == ("US", "IN")


def test_logical_table_granularities_tuple():
    table = LogicalTable("t", [TimeGrain.DAY, TimeGrain.DAY, AllGranularity.ALL])
    assert table.granularities == (TimeGrain.DAY, AllGranularity.ALL)


# ── Response shaping ────────────────────────────────────

def test_response_format_from_name():
    assert ResponseFormatType.from_name("CSV") is ResponseFormatType.CSV


def test_response_format_unknown():
    with pytest.raises(ValueError, match="Unknown response format"):
        ResponseFormatType.from_name("xml")


def test_pagination_bounds():
    assert PaginationParameters(per_page=10).page == 1
    with pytest.raises(ValueError):
        PaginationParameters(per_page=0)
    with pytest.raises(ValueError):
        PaginationParameters(per_page=10, page=0)
