"""
Loads dimension definitions from YAML into ``Dimension`` objects.

Expected shape::

    fieldSets:
      default:
        - name: id
          description: Dimension ID
        - name: desc
          description: Dimension Description
    dimensions:
      - apiName: page
        description: Page is a document suitable for the World Wide Web
        longName: wiki page
        category: General
        fields: default          # a field-set name ...
      - apiName: user
        fields:                  # ... or an inline list
          - id
          - name: desc
            description: User name

A dimension without ``fields`` gets the ``default`` field set when one is
defined.  Each dimension is bound to the key/value store and search provider
registered under its api name.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.catalog.dictionaries import DimensionDictionary
from src.catalog.stores import SearchProviderRegistry, StoreRegistry
from src.core.config import get_settings
from src.core.errors import ConfigLoadError, DuplicateDimensionError
from src.core.logging import get_logger
from src.core.utils import read_yaml
from src.request.model import Dimension, DimensionField

logger = get_logger(__name__)

DEFAULT_FIELD_SET = "default"


# ── Config templates ─────────────────────────────────────

class FieldTemplate(BaseModel):
    name: str
    description: str = ""


class DimensionTemplate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    api_name: str = Field(..., alias="apiName")
    description: str = ""
    long_name: str = Field("", alias="longName")
    category: str = "General"
    fields: Union[str, list[Union[str, FieldTemplate]], None] = None

    def resolve_fields(self, field_sets: dict[str, list[FieldTemplate]]) -> tuple[DimensionField, ...]:
        """Turn the ``fields`` entry into concrete dimension fields."""
        if self.fields is None:
            raw = field_sets.get(DEFAULT_FIELD_SET, [])
        elif isinstance(self.fields, str):
            if self.fields not in field_sets:
                raise ConfigLoadError(
                    f"Dimension '{self.api_name}' references unknown field set '{self.fields}'. "
                    f"Known: {', '.join(field_sets) or '(none)'}"
                )
            raw = field_sets[self.fields]
        else:
            raw = self.fields
        return tuple(
            DimensionField(f) if isinstance(f, str) else DimensionField(f.name, f.description)
            for f in raw
        )


class DimensionConfigTemplate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    field_sets: dict[str, list[FieldTemplate]] = Field(default_factory=dict, alias="fieldSets")
    dimensions: list[DimensionTemplate] = Field(default_factory=list)


def parse_dimension_config(raw: dict[str, Any] | None) -> DimensionConfigTemplate:
    try:
        return DimensionConfigTemplate.model_validate(raw or {})
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid dimension configuration: {exc}") from exc


# ── Loader ───────────────────────────────────────────────

class DimensionsLoader:
    """Builds every configured dimension, bound to its store and search provider.

    Parameters
    ----------
    config : DimensionConfigTemplate
        Parsed dimension configuration.
    stores : StoreRegistry
        Supplies the key/value store for each dimension.
    search_providers : SearchProviderRegistry
        Supplies the search provider for each dimension.
    """

    def __init__(
        self,
        config: DimensionConfigTemplate,
        stores: StoreRegistry,
        search_providers: SearchProviderRegistry,
    ):
        self._dimensions: dict[str, Dimension] = {}
        seen: set[str] = set()
        for template in config.dimensions:
            if template.api_name.lower() in seen:
                exc = DuplicateDimensionError(
                    f"Dimension '{template.api_name}' is defined more than once in the dimension configuration"
                )
                logger.error("%s", exc)
                raise exc
            seen.add(template.api_name.lower())
            fields = template.resolve_fields(config.field_sets)
            store = stores.get_instance(template.api_name)
            provider = search_providers.get_instance(template.api_name)
            provider.set_key_value_store(store)
            self._dimensions[template.api_name] = Dimension(
                api_name=template.api_name,
                description=template.description,
                long_name=template.long_name,
                category=template.category,
                fields=fields,
                default_fields=fields,
                key_value_store=store,
                search_provider=provider,
            )
        logger.info("Loaded %d dimension definitions", len(self._dimensions))

    @classmethod
    def from_file(
        cls,
        path: Path | None = None,
        stores: StoreRegistry | None = None,
        search_providers: SearchProviderRegistry | None = None,
    ) -> DimensionsLoader:
        path = path or get_settings().dimension_config_path
        return cls(
            parse_dimension_config(read_yaml(path)),
            stores or StoreRegistry(),
            search_providers or SearchProviderRegistry(),
        )

    def all_dimensions(self) -> list[Dimension]:
        return list(self._dimensions.values())

    def dimensions_by_name(self, names: Iterable[str]) -> list[Dimension]:
        """Return dimensions for *names*, in the order asked; unknown names are skipped."""
        return [self._dimensions[n] for n in names if n in self._dimensions]

    def populate(self, dictionary: DimensionDictionary) -> DimensionDictionary:
        """Register every loaded dimension; a name clash raises ``DuplicateDimensionError``."""
        for dim in self._dimensions.values():
            dictionary.register(dim)
        return dictionary
