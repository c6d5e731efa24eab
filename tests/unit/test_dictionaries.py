"""
Unit tests -- metric / dimension dictionaries and the store registries.
"""
import pytest

from src.catalog.dictionaries import DimensionDictionary, MetricDictionary
from src.catalog.stores import SearchProviderRegistry, StoreRegistry
from src.core.errors import DuplicateDimensionError
from src.request.model import Dimension, LogicalMetric


def test_metric_lookup_is_case_insensitive():
    metrics = MetricDictionary([LogicalMetric("pageViews")])
    assert metrics.find_by_name("PAGEVIEWS") == LogicalMetric("pageViews")
    assert "pageviews" in metrics
    assert metrics.find_by_name("missing") is None


def test_add_returns_false_on_existing_name():
    metrics = MetricDictionary()
    assert metrics.add(LogicalMetric("added")) is True
    assert metrics.add(LogicalMetric("ADDED", "other")) is False
    assert metrics.find_by_name("added").expression == ""
    assert len(metrics) == 1


def test_add_all_reports_change():
    dims = DimensionDictionary()
    assert dims.add_all([Dimension("page"), Dimension("user")]) is True
    assert dims.add_all([Dimension("page")]) is False
    assert dims.names() == ["page", "user"]
    assert dims.find_all() == frozenset({Dimension("page"), Dimension("user")})


def test_register_raises_on_duplicate_dimension():
    dims = DimensionDictionary([Dimension("page")])
    with pytest.raises(DuplicateDimensionError):
        dims.register(Dimension("Page"))


def test_store_registry_returns_same_instance():
    stores = StoreRegistry()
    assert stores.get_instance("page") is stores.get_instance("page")
    assert stores.get_instance("page") is not stores.get_instance("user")
    assert stores.names() == ["page", "user"]


def test_key_value_store_roundtrip():
    store = StoreRegistry().get_instance("page")
    store.put_all({"Main_Page": "Main Page", "Foo": "Foo"})
    assert store.get("Main_Page") == "Main Page"
    assert store.remove("Foo") is True
    assert store.remove("Foo") is False
    assert len(store) == 1


def test_search_provider_scans_store():
    store = StoreRegistry().get_instance("page")
    provider = SearchProviderRegistry().get_instance("page")
    assert provider.find_all_keys() == []
    provider.set_key_value_store(store)
    store.put_all({"Main_Page": "", "Main_Street": "", "Other": ""})
    assert provider.find_keys(prefix="main") == ["Main_Page", "Main_Street"]
    assert provider.find_keys(contains="street") == ["Main_Street"]
