"""
Maker templates -- the declarative form of one configured metric maker.

YAML shape::

    makers:
      - name: longSum
        classPath: LongSumMaker
      - name: dayAvg
        classPath: AggregationAverageMaker
        params:
          innerGrain: DAY

``classPath`` is either a built-in maker name or a dotted ``module.Class``
path.  Parameter values are kept as strings; the maker dictionary converts
them according to the maker constructor's annotations.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.core.config import get_settings
from src.core.errors import ConfigLoadError
from src.core.logging import get_logger
from src.core.utils import read_yaml

logger = get_logger(__name__)


class MakerTemplate(BaseModel):
    """One ``makers`` entry: a registration name, a class path, and literal params."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    class_path: str = Field(..., alias="classPath", min_length=1)
    params: dict[str, str] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _stringify_params(cls, v: Any) -> Any:
        # YAML turns `5` into an int and `true` into a bool; params are literals.
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): _as_literal(val) for k, val in v.items()}
        return v

    def param(self, name: str) -> str | None:
        return self.params.get(name)


def _as_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_maker_templates(raw: Any) -> list[MakerTemplate]:
    """Validate the parsed YAML document into templates, keeping file order."""
    if raw is None:
        return []
    if not isinstance(raw, dict) or not isinstance(raw.get("makers", []), list):
        raise ConfigLoadError("Maker configuration must be a mapping with a 'makers' list")
    try:
        return [MakerTemplate.model_validate(entry) for entry in raw.get("makers") or []]
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid maker template: {exc}") from exc


def load_maker_templates(path: Path | None = None) -> list[MakerTemplate]:
    """Load maker templates from YAML (defaults to ``Settings.maker_config_path``)."""
    path = path or get_settings().maker_config_path
    templates = parse_maker_templates(read_yaml(path))
    logger.info("Read %d maker templates from %s", len(templates), path)
    return templates
