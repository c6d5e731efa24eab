"""
Metric makers -- small objects that know how to build one kind of logical metric.

A maker is configured once (by the maker dictionary, from YAML) and then asked
to ``make`` any number of metrics: given a new metric name and the names of
the metrics it depends on, it returns a ``LogicalMetric`` whose expression
describes the aggregation.  Makers that build on other metrics look their
dependencies up in the shared ``MetricDictionary``.
"""
from __future__ import annotations

from typing import Sequence

from src.catalog.dictionaries import DimensionDictionary, MetricDictionary
from src.request.model import LogicalMetric
from src.request.time_grain import TimeGrain

VARIABLE_DEPENDENCIES = -1


class MetricMaker:
    """Base class.  Subclasses set ``dependent_metrics_required`` and implement ``_expression``."""

    dependent_metrics_required: int = 1
    category: str = "General"

    def make(self, metric_name: str, dependent_metrics: Sequence[str] = ()) -> LogicalMetric:
        deps = list(dependent_metrics)
        self._check_dependencies(metric_name, deps)
        return LogicalMetric(
            name=metric_name,
            expression=self._expression(metric_name, deps),
            category=self.category,
            dependencies=tuple(deps),
        )

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        raise NotImplementedError

    def _check_dependencies(self, metric_name: str, deps: list[str]) -> None:
        required = self.dependent_metrics_required
        if required == VARIABLE_DEPENDENCIES:
            if not deps:
                raise ValueError(f"{type(self).__name__} needs at least one dependency for '{metric_name}'")
        elif len(deps) != required:
            raise ValueError(
                f"{type(self).__name__} expects {required} dependent metric(s) for "
                f"'{metric_name}', got {len(deps)}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _DictionaryBackedMaker(MetricMaker):
    def __init__(self, metric_dictionary: MetricDictionary):
        self.metric_dictionary = metric_dictionary

    def _dependency(self, name: str) -> LogicalMetric:
        metric = self.metric_dictionary.find_by_name(name)
        if metric is None:
            raise ValueError(f"Dependent metric '{name}' is not in the metric dictionary")
        return metric


# ── Raw aggregations ─────────────────────────────────────

class LongSumMaker(_DictionaryBackedMaker):
    def _expression(self, metric_name: str, deps: list[str]) -> str:
        return f"longSum({deps[0]})"


class DoubleSumMaker(_DictionaryBackedMaker):
    def _expression(self, metric_name: str, deps: list[str]) -> str:
        return f"doubleSum({deps[0]})"


class CountMaker(_DictionaryBackedMaker):
    dependent_metrics_required = 0

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        return "count(*)"


class ConstantMaker(_DictionaryBackedMaker):
    """The single 'dependency' is the constant's literal value."""

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        value = float(deps[0])
        return f"constant({value:g})"


# ── Post aggregations ────────────────────────────────────

class ArithmeticMaker(_DictionaryBackedMaker):
    _OPERATORS = {"PLUS": "+", "MINUS": "-", "MULTIPLY": "*", "DIVIDE": "/"}

    dependent_metrics_required = VARIABLE_DEPENDENCIES

    def __init__(self, metric_dictionary: MetricDictionary, function: str):
        super().__init__(metric_dictionary)
        key = function.upper()
        if key not in self._OPERATORS:
            raise ValueError(f"Unknown arithmetic function '{function}'. Allowed: {', '.join(self._OPERATORS)}")
        self.function = key

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        for name in deps:
            self._dependency(name)
        op = self._OPERATORS[self.function]
        return "(" + f" {op} ".join(deps) + ")"

    def __repr__(self) -> str:
        return f"ArithmeticMaker(function={self.function!r})"


class RatioMaker(_DictionaryBackedMaker):
    dependent_metrics_required = 2

    def __init__(self, metric_dictionary: MetricDictionary, scale: float = 1.0):
        super().__init__(metric_dictionary)
        self.scale = scale

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        numerator, denominator = (self._dependency(n).name for n in deps)
        if self.scale == 1.0:
            return f"({numerator} / {denominator})"
        return f"({numerator} / {denominator}) * {self.scale:g}"

    def __repr__(self) -> str:
        return f"RatioMaker(scale={self.scale!r})"


class AggregationAverageMaker(_DictionaryBackedMaker):
    """Average of a metric's per-``inner_grain`` totals over the query's granularity."""

    def __init__(self, metric_dictionary: MetricDictionary, inner_grain: TimeGrain):
        super().__init__(metric_dictionary)
        self.inner_grain = inner_grain

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        inner = self._dependency(deps[0])
        return f"avg({inner.name} by {self.inner_grain.api_name})"

    def __repr__(self) -> str:
        return f"AggregationAverageMaker(inner_grain={self.inner_grain.name})"


class ThetaSketchMaker(_DictionaryBackedMaker):
    category = "Sketch"

    def __init__(self, metric_dictionary: MetricDictionary, sketch_size: int):
        super().__init__(metric_dictionary)
        self.sketch_size = sketch_size

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        return f"thetaSketch({deps[0]}, size={self.sketch_size})"

    def __repr__(self) -> str:
        return f"ThetaSketchMaker(sketch_size={self.sketch_size})"


# ── Dimension-aware makers ───────────────────────────────

class _DimensionBackedMaker(MetricMaker):
    def __init__(self, dimension_dictionary: DimensionDictionary):
        self.dimension_dictionary = dimension_dictionary

    def _dimension_name(self, name: str) -> str:
        dim = self.dimension_dictionary.find_by_name(name)
        if dim is None:
            raise ValueError(f"Dimension '{name}' is not in the dimension dictionary")
        return dim.api_name


class CardinalityMaker(_DimensionBackedMaker):
    """Approximate distinct count of one or more dimensions."""

    dependent_metrics_required = VARIABLE_DEPENDENCIES

    def __init__(self, dimension_dictionary: DimensionDictionary, by_row: bool = False):
        super().__init__(dimension_dictionary)
        self.by_row = by_row

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        dims = ", ".join(self._dimension_name(d) for d in deps)
        return f"cardinality({dims}, byRow={str(self.by_row).lower()})"


class RowNumMaker(_DimensionBackedMaker):
    dependent_metrics_required = 0

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        return "rowNum()"


class FilteredAggregationMaker(MetricMaker):
    """A metric restricted to rows where a dimension matches a value.

    Dependencies are ``[metric, dimension, value]``.
    """

    dependent_metrics_required = 3

    def __init__(self, metric_dictionary: MetricDictionary, dimension_dictionary: DimensionDictionary):
        self.metric_dictionary = metric_dictionary
        self.dimension_dictionary = dimension_dictionary

    def _expression(self, metric_name: str, deps: list[str]) -> str:
        metric_ref, dim_ref, value = deps
        metric = self.metric_dictionary.find_by_name(metric_ref)
        if metric is None:
            raise ValueError(f"Dependent metric '{metric_ref}' is not in the metric dictionary")
        dim = self.dimension_dictionary.find_by_name(dim_ref)
        if dim is None:
            raise ValueError(f"Dimension '{dim_ref}' is not in the dimension dictionary")
        return f"filtered({metric.expression or metric.name}, {dim.api_name} == {value!r})"


BUILTIN_MAKERS: dict[str, type[MetricMaker]] = {
    cls.__name__: cls
    for cls in (
        LongSumMaker,
        DoubleSumMaker,
        CountMaker,
        ConstantMaker,
        ArithmeticMaker,
        RatioMaker,
        AggregationAverageMaker,
        ThetaSketchMaker,
        CardinalityMaker,
        RowNumMaker,
        FilteredAggregationMaker,
    )
}
