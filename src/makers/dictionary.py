"""
MetricMakerDictionary -- builds named metric makers from templates.

For every ``MakerTemplate`` the dictionary:

  1. resolves ``class_path`` (built-in maker name, else dotted import path)
  2. reads the class constructor's parameters and their annotations
  3. binds each parameter, first match wins:
       a. ``MetricDictionary``    -> the shared metric dictionary
       b. ``DimensionDictionary`` -> the shared dimension dictionary
       c. ``TimeGrain``           -> ``params[name]`` looked up as a grain
       d. ``int``                 -> ``params[name]`` parsed as an integer
       e. ``float``               -> ``params[name]`` parsed as a float
       f. ``bool``                -> ``params[name]`` parsed as true/false
       g. ``str``                 -> ``params[name]`` as-is
     A parameter that matches none of these, or whose value is missing
     from ``params``, falls back to the constructor default; without one
     the template is rejected.
  4. calls the constructor and registers the maker under ``name.lower()``

A template that cannot be built is logged and skipped; the rest still load.
Registering the same name twice aborts the whole build with
``DuplicateMakerError``.
"""
from __future__ import annotations

import importlib
import inspect
import re
import types
from typing import Any, Iterable, Union, get_args, get_origin, get_type_hints

from src.catalog.dictionaries import DimensionDictionary, MetricDictionary
from src.core.errors import DuplicateMakerError, MakerTemplateError
from src.core.logging import get_logger
from src.core.utils import timer
from src.makers.makers import BUILTIN_MAKERS, MetricMaker
from src.makers.template import MakerTemplate
from src.request.time_grain import TimeGrain

logger = get_logger(__name__)

_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}

_NO_VALUE = object()


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _unwrap_optional(annotation: Any) -> Any:
    """Reduce ``Optional[X]`` / ``X | None`` to ``X``; other annotations pass through."""
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def resolve_maker_class(class_path: str) -> type[MetricMaker]:
    """Return the maker class for a built-in name or a dotted ``module.Class`` path."""
    if class_path in BUILTIN_MAKERS:
        return BUILTIN_MAKERS[class_path]
    module_name, _, class_name = class_path.rpartition(".")
    if not module_name:
        raise LookupError(
            f"Unknown maker '{class_path}'. Built-in makers: {', '.join(BUILTIN_MAKERS)}"
        )
    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, class_name)
    except (ImportError, AttributeError) as exc:
        raise LookupError(f"Cannot import maker class '{class_path}': {exc}") from exc
    if not (inspect.isclass(cls) and issubclass(cls, MetricMaker)):
        raise LookupError(f"'{class_path}' is not a MetricMaker subclass")
    return cls


class MetricMakerDictionary:
    """Case-insensitive, write-once mapping of maker name -> maker instance.

    Parameters
    ----------
    templates : iterable of MakerTemplate, optional
        Makers to build immediately, in order.
    metric_dictionary : MetricDictionary, optional
        Injected into makers whose constructor asks for one.
    dimension_dictionary : DimensionDictionary, optional
        Injected into makers whose constructor asks for one.
    """

    def __init__(
        self,
        templates: Iterable[MakerTemplate] | None = None,
        metric_dictionary: MetricDictionary | None = None,
        dimension_dictionary: DimensionDictionary | None = None,
    ):
        self._name_to_maker: dict[str, MetricMaker] = {}
        self.metric_dictionary = metric_dictionary if metric_dictionary is not None else MetricDictionary()
        self.dimension_dictionary = (
            dimension_dictionary if dimension_dictionary is not None else DimensionDictionary()
        )
        self.skipped: dict[str, str] = {}
        if templates is not None:
            self.build_all(templates)

    # ── Building ────────────────────────────────────────

    def build_all(self, templates: Iterable[MakerTemplate]) -> None:
        """Build and register every template; skips bad ones, raises on duplicates."""
        with timer() as t:
            for template in templates:
                try:
                    maker = self.build(template)
                except MakerTemplateError as exc:
                    self.skipped[template.name] = exc.reason
                    logger.warning("Skipping maker template: %s", exc)
                    continue
                self._register(template.name, maker)
        logger.info(
            "Built %d metric makers (%d skipped) in %d ms",
            len(self._name_to_maker), len(self.skipped), t["elapsed_ms"],
        )

    def build(self, template: MakerTemplate) -> MetricMaker:
        """Instantiate the maker described by *template* without registering it."""
        try:
            maker_class = resolve_maker_class(template.class_path)
        except LookupError as exc:
            raise MakerTemplateError(template.name, str(exc)) from exc

        args = self._bind_arguments(maker_class, template)
        try:
            return maker_class(**args)
        except Exception as exc:
            raise MakerTemplateError(
                template.name, f"{maker_class.__name__}(...) raised {type(exc).__name__}: {exc}"
            ) from exc

    def _bind_arguments(self, maker_class: type[MetricMaker], template: MakerTemplate) -> dict[str, Any]:
        if maker_class.__init__ is object.__init__:
            return {}
        signature = inspect.signature(maker_class.__init__)
        try:
            hints = get_type_hints(maker_class.__init__)
        except (NameError, TypeError) as exc:
            raise MakerTemplateError(template.name, f"unresolvable annotations: {exc}") from exc

        args: dict[str, Any] = {}
        for name, param in list(signature.parameters.items())[1:]:  # skip self
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            value = self._resolve_parameter(name, hints.get(name), template)
            if value is _NO_VALUE:
                if param.default is param.empty:
                    raise MakerTemplateError(
                        template.name,
                        f"no value for required parameter '{name}' of {maker_class.__name__}",
                    )
                continue
            args[name] = value
        return args

    def _resolve_parameter(self, name: str, annotation: Any, template: MakerTemplate) -> Any:
        annotation = _unwrap_optional(annotation)
        if annotation is MetricDictionary:
            return self.metric_dictionary
        if annotation is DimensionDictionary:
            return self.dimension_dictionary
        if annotation not in (TimeGrain, int, float, bool, str):
            return _NO_VALUE

        raw = self._literal(name, template)
        if raw is None:
            return _NO_VALUE
        try:
            if annotation is TimeGrain:
                return TimeGrain.from_name(raw)
            if annotation is int:
                return int(raw)
            if annotation is float:
                return float(raw)
            if annotation is bool:
                return _parse_bool(raw)
            return raw
        except ValueError as exc:
            raise MakerTemplateError(
                template.name, f"bad value {raw!r} for parameter '{name}': {exc}"
            ) from exc

    @staticmethod
    def _literal(name: str, template: MakerTemplate) -> str | None:
        """Look up a param by its Python name, then its camelCase spelling."""
        for key in (name, _camel(name)):
            value = template.param(key)
            if value is not None:
                return value
        for key, value in template.params.items():
            if _snake(key) == name:
                return value
        return None

    # ── Registration ────────────────────────────────────

    def add(self, name: str, maker: MetricMaker) -> bool:
        """Register *maker* under *name*; returns ``False`` if the name is taken."""
        key = name.lower()
        if key in self._name_to_maker:
            return False
        self._name_to_maker[key] = maker
        return True

    def add_all(self, makers: Iterable[MetricMaker]) -> bool:
        """Register makers under their class names.  Returns True if anything was added."""
        changed = False
        for maker in makers:
            changed = self.add(type(maker).__name__, maker) or changed
        return changed

    def _register(self, name: str, maker: MetricMaker) -> None:
        if not self.add(name, maker):
            exc = DuplicateMakerError(
                f"Maker name '{name}' is already registered; "
                "multiple loaders updating the metric maker dictionary"
            )
            logger.error("%s", exc)
            raise exc

    # ── Lookups ─────────────────────────────────────────

    def find_by_name(self, name: str) -> MetricMaker | None:
        return self._name_to_maker.get(name.lower())

    def find_all(self) -> frozenset[MetricMaker]:
        return frozenset(self._name_to_maker.values())

    def names(self) -> list[str]:
        return list(self._name_to_maker)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._name_to_maker

    def __len__(self) -> int:
        return len(self._name_to_maker)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetricMakerDictionary):
            return NotImplemented
        return self._name_to_maker == other._name_to_maker

    __hash__ = None  # mutable during the build pass

    def __repr__(self) -> str:
        return f"MetricMaker Dictionary: {self._name_to_maker}"


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"expected one of {sorted(_TRUE | _FALSE)}")
