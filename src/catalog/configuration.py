"""
Wires the catalog together at startup: dimensions, metrics, metric makers.

Owns the store / search-provider registries so that their lifetime is tied to
the configuration pass rather than to module globals.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from src.catalog.dictionaries import DimensionDictionary, MetricDictionary
from src.catalog.dimension_loader import DimensionsLoader
from src.catalog.stores import SearchProviderRegistry, StoreRegistry
from src.core.config import get_settings
from src.core.logging import get_logger
from src.makers.dictionary import MetricMakerDictionary
from src.makers.template import load_maker_templates

logger = get_logger(__name__)


@dataclass
class Catalog:
    dimensions: DimensionDictionary
    metrics: MetricDictionary
    makers: MetricMakerDictionary
    stores: StoreRegistry = field(default_factory=StoreRegistry)
    search_providers: SearchProviderRegistry = field(default_factory=SearchProviderRegistry)


def load_catalog(
    dimension_config_path: Path | None = None,
    maker_config_path: Path | None = None,
    metric_dictionary: MetricDictionary | None = None,
) -> Catalog:
    """Run one configuration pass and return the populated dictionaries.

    ``DuplicateDimensionError`` / ``DuplicateMakerError`` propagate: a clash
    means the configuration is inconsistent and startup must stop.
    """
    settings = get_settings()
    stores = StoreRegistry()
    search_providers = SearchProviderRegistry()

    loader = DimensionsLoader.from_file(
        dimension_config_path or settings.dimension_config_path, stores, search_providers,
    )
    dimensions = loader.populate(DimensionDictionary())
    metrics = metric_dictionary if metric_dictionary is not None else MetricDictionary()

    makers = MetricMakerDictionary(
        load_maker_templates(maker_config_path or settings.maker_config_path),
        metrics,
        dimensions,
    )
    logger.info(
        "Catalog ready: %d dimensions, %d metrics, %d makers",
        len(dimensions), len(metrics), len(makers),
    )
    return Catalog(dimensions, metrics, makers, stores, search_providers)
