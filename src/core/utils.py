"""
Small shared utilities.
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Hashable, Iterable, TypeVar

import yaml

from src.core.errors import ConfigLoadError

T = TypeVar("T", bound=Hashable)


@contextmanager
def timer() -> Generator[dict, None, None]:
    """Context manager that records elapsed wall-clock milliseconds."""
    result: dict = {}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["elapsed_ms"] = int((time.perf_counter() - start) * 1000)


def ordered_unique(items: Iterable[T] | None) -> tuple[T, ...]:
    """Freeze *items* into a tuple, dropping repeats (first occurrence wins)."""
    if not items:
        return ()
    return tuple(dict.fromkeys(items))


def read_yaml(path: Path) -> Any:
    """Read a YAML file, wrapping I/O and syntax errors in ``ConfigLoadError``."""
    try:
        with open(path) as f:
            return yaml.safe_load(f)
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read configuration file '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Malformed YAML in '{path}': {exc}") from exc
