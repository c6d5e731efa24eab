"""
Exception types shared across the catalog and maker factory.

Recoverable problems with a single configuration entry raise
``MakerTemplateError``; the factory logs them and moves on.  Duplicate
registrations mean two loaders are populating the same dictionary, which is
a programming error, so they raise ``RuntimeError`` subclasses that nothing
inside this package catches.
"""
from __future__ import annotations


class ConfigLoadError(RuntimeError):
    """A configuration file is missing or not in the expected shape."""


class MakerTemplateError(ValueError):
    """A single maker template cannot be turned into a maker."""

    def __init__(self, template_name: str, reason: str):
        self.template_name = template_name
        self.reason = reason
        super().__init__(f"Cannot build maker '{template_name}': {reason}")


class DuplicateMakerError(RuntimeError):
    """A maker name was registered twice (case-insensitively)."""


class DuplicateDimensionError(RuntimeError):
    """A dimension api name was registered twice (case-insensitively)."""
