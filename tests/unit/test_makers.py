"""
Unit tests -- metric makers building logical metrics.
"""
import pytest

from src.catalog.dictionaries import DimensionDictionary, MetricDictionary
from src.makers.makers import (
    AggregationAverageMaker,
    ArithmeticMaker,
    CardinalityMaker,
    ConstantMaker,
    CountMaker,
    FilteredAggregationMaker,
    LongSumMaker,
    RatioMaker,
    RowNumMaker,
    ThetaSketchMaker,
)
from src.request.model import Dimension, LogicalMetric
from src.request.time_grain import TimeGrain


@pytest.fixture
def metrics() -> MetricDictionary:
    return MetricDictionary([
        LogicalMetric("added", "longSum(added)"),
        LogicalMetric("deleted", "longSum(deleted)"),
    ])


@pytest.fixture
def dimensions() -> DimensionDictionary:
    return DimensionDictionary([Dimension("page"), Dimension("user")])


def test_long_sum(metrics):
    m = LongSumMaker(metrics).make("added", ["added"])
    assert m == LogicalMetric("added", "longSum(added)", dependencies=("added",))


def test_wrong_dependency_count(metrics):
    with pytest.raises(ValueError, match="expects 1"):
        LongSumMaker(metrics).make("added", ["a", "b"])


def test_count_takes_no_dependencies(metrics):
    assert CountMaker(metrics).make("count").expression == "count(*)"


def test_constant(metrics):
    assert ConstantMaker(metrics).make("one", ["1"]).expression == "constant(1)"


def test_arithmetic(metrics):
    m = ArithmeticMaker(metrics, "minus").make("delta", ["added", "deleted"])
    assert m.expression == "(added - deleted)"
    assert m.dependencies == ("added", "deleted")


def test_arithmetic_unknown_function(metrics):
    with pytest.raises(ValueError, match="Unknown arithmetic function"):
        ArithmeticMaker(metrics, "MODULO")


def test_arithmetic_unknown_dependency(metrics):
    with pytest.raises(ValueError, match="not in the metric dictionary"):
        ArithmeticMaker(metrics, "PLUS").make("x", ["added", "missing"])


def test_ratio_with_scale(metrics):
    assert RatioMaker(metrics).make("r", ["added", "deleted"]).expression == "(added / deleted)"
    assert RatioMaker(metrics, 100.0).make("p", ["added", "deleted"]).expression == "(added / deleted) * 100"


def test_aggregation_average(metrics):
    m = AggregationAverageMaker(metrics, TimeGrain.DAY).make("dayAvgAdded", ["added"])
    assert m.expression == "avg(added by day)"


def test_theta_sketch(metrics):
    m = ThetaSketchMaker(metrics, 4096).make("uniques", ["user"])
    assert m.expression == "thetaSketch(user, size=4096)"
    assert m.category == "Sketch"


def test_cardinality(dimensions):
    m = CardinalityMaker(dimensions).make("users", ["USER"])
    assert m.expression == "cardinality(user, byRow=false)"


def test_cardinality_unknown_dimension(dimensions):
    with pytest.raises(ValueError, match="not in the dimension dictionary"):
        CardinalityMaker(dimensions).make("x", ["country"])


def test_row_num(dimensions):
    assert RowNumMaker(dimensions).make("rows").expression == "rowNum()"


def test_filtered_aggregation(metrics, dimensions):
    m = FilteredAggregationMaker(metrics, dimensions).make("pageAdded", ["added", "page", "Main_Page"])
    assert m.expression == "filtered(longSum(added), page == 'Main_Page')"
